from __future__ import annotations

import json
import logging
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from fieldreports.core.errors import BackendUnavailable

logger = logging.getLogger("fieldreports.stores.documents")


def document_key(collection: str, key: str) -> str:
    return f"{collection}/{key}"


class RedisDocumentStore:
    """JSON documents stored as plain string values under `"{collection}/{key}"`."""

    def __init__(self, client: Redis) -> None:
        self.client = client

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        try:
            raw = await self.client.get(document_key(collection, key))
        except RedisError as exc:
            raise BackendUnavailable(f"document lookup {collection}/{key} failed: {exc}") from exc
        if raw is None:
            return None
        try:
            doc = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Document %s/%s is not valid JSON", collection, key)
            return None
        return doc if isinstance(doc, dict) else None

    async def put(self, collection: str, key: str, document: dict[str, Any]) -> None:
        try:
            await self.client.set(document_key(collection, key), json.dumps(document, ensure_ascii=False))
        except RedisError as exc:
            raise BackendUnavailable(f"document write {collection}/{key} failed: {exc}") from exc
