"""Office roster retrieval strategies and the arbitration harness.

The relational store may silently cap result sizes, and no single
query shape is trusted to return the full roster. Each strategy is an async
generator of row batches; the harness runs all of them, keeps whatever each
one managed to yield before failing, and the outcome with the most rows wins.

Every paging strategy carries a hard page bound, so a store that keeps
returning full pages (or keeps ignoring the offset) cannot loop forever.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Sequence

from fieldreports.core.config import Settings
from fieldreports.services.types import StrategyOutcome
from fieldreports.stores.base import RelationalStore

logger = logging.getLogger("fieldreports.offices.strategies")

OFFICES_TABLE = "offices"
OFFICE_NAME = "Office name"
OFFICE_COLUMNS = ("Office name", "Region", "Division", "Facility ID", "Reporting Office Nam")

Rows = list[dict[str, Any]]


@dataclass(frozen=True, slots=True)
class RetrievalStrategy:
    name: str
    fetch: Callable[[], AsyncIterator[Rows]]


async def paged(
    store: RelationalStore,
    *,
    page_size: int,
    max_pages: int,
    order_by: str | None = None,
    table: str = OFFICES_TABLE,
) -> AsyncIterator[Rows]:
    """Consecutive inclusive ranges until an empty or short page, at most `max_pages`."""
    for page in range(max_pages):
        start = page * page_size
        batch = await store.select(table, order_by=order_by, start=start, end=start + page_size - 1)
        logger.debug("Range %d-%d returned %d rows", start, start + page_size - 1, len(batch))
        if not batch:
            return
        yield batch
        if len(batch) < page_size:
            return
    logger.info("Page bound reached (%d pages of %d)", max_pages, page_size)


async def single_range(
    store: RelationalStore,
    *,
    size: int,
    order_by: str | None = None,
    table: str = OFFICES_TABLE,
) -> AsyncIterator[Rows]:
    yield await store.select(table, order_by=order_by, start=0, end=size - 1)


async def minimal_columns(store: RelationalStore, *, table: str = OFFICES_TABLE) -> AsyncIterator[Rows]:
    yield await store.select(table, OFFICE_COLUMNS)


def default_strategies(store: RelationalStore, settings: Settings) -> list[RetrievalStrategy]:
    return [
        RetrievalStrategy(
            "pagination",
            lambda: paged(
                store,
                page_size=settings.OFFICE_PAGE_SIZE,
                max_pages=settings.OFFICE_MAX_PAGES,
                order_by=OFFICE_NAME,
            ),
        ),
        RetrievalStrategy(
            "high-range",
            lambda: single_range(store, size=settings.OFFICE_HIGH_RANGE, order_by=OFFICE_NAME),
        ),
        RetrievalStrategy(
            "no-ordering",
            lambda: single_range(store, size=settings.OFFICE_HIGH_RANGE),
        ),
        RetrievalStrategy(
            "batched",
            lambda: paged(
                store,
                page_size=settings.OFFICE_BATCH_SIZE,
                max_pages=settings.OFFICE_MAX_BATCHES,
            ),
        ),
        RetrievalStrategy("minimal-columns", lambda: minimal_columns(store)),
    ]


async def run_strategy(strategy: RetrievalStrategy) -> StrategyOutcome:
    outcome = StrategyOutcome(strategy.name)
    try:
        async for batch in strategy.fetch():
            outcome.records.extend(batch)
    except Exception as exc:
        outcome.error = str(exc) or exc.__class__.__name__
        logger.warning(
            "Strategy %s failed after %d rows: %s", strategy.name, len(outcome.records), outcome.error
        )
    else:
        logger.info("Strategy %s returned %d rows", strategy.name, len(outcome.records))
    return outcome


def pick_best(outcomes: Sequence[StrategyOutcome]) -> StrategyOutcome:
    """Most records wins; ties go to the earlier strategy."""
    best = outcomes[0]
    for outcome in outcomes[1:]:
        if len(outcome.records) > len(best.records):
            best = outcome
    return best


async def arbitrate(strategies: Sequence[RetrievalStrategy]) -> tuple[StrategyOutcome, list[StrategyOutcome]]:
    """Run every strategy concurrently and return (best, all outcomes in input order)."""
    if not strategies:
        raise ValueError("at least one retrieval strategy is required")
    outcomes = list(await asyncio.gather(*(run_strategy(s) for s in strategies)))
    return pick_best(outcomes), outcomes
