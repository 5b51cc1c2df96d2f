from __future__ import annotations

import logging
from typing import Awaitable, Callable, Sequence

logger = logging.getLogger("fieldreports.locator")


class ResourceLocator:
    """Try an ordered list of candidate names and remember the first that works.

    `check(name)` is awaited for each candidate in order; a candidate is
    accepted when the check returns without raising. The accepted name is
    kept for the lifetime of the locator (no re-checking per call) until
    `reset()` is called.
    """

    def __init__(self, candidates: Sequence[str], check: Callable[[str], Awaitable[object]], *, kind: str = "resource"):
        self.candidates = list(candidates)
        self._check = check
        self.kind = kind
        self._resolved: str | None = None

    @property
    def resolved(self) -> str | None:
        return self._resolved

    async def locate(self) -> str | None:
        if self._resolved is not None:
            return self._resolved
        for name in self.candidates:
            try:
                await self._check(name)
            except Exception as exc:
                logger.info("%s candidate %r not usable: %s", self.kind, name, exc)
                continue
            logger.info("Using %s %r", self.kind, name)
            self._resolved = name
            return name
        return None

    def reset(self) -> None:
        self._resolved = None
