from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fieldreports.core.cache import TTLCache
from fieldreports.core.config import Settings, settings
from fieldreports.services.access import AccessPolicyEngine
from fieldreports.services.coverage import CoverageAggregator
from fieldreports.services.field_schema import FieldSchemaRegistry
from fieldreports.services.forms import FormCatalog
from fieldreports.services.hierarchy import OfficeHierarchyResolver
from fieldreports.services.offices import OfficeDirectory
from fieldreports.services.reconcile import SubmissionReconciler
from fieldreports.services.strategies import default_strategies
from fieldreports.services.submissions import SubmissionSource, submissions_locator
from fieldreports.stores.base import DocumentStore, RelationalStore

logger = logging.getLogger("fieldreports.services")


@dataclass(slots=True)
class Services:
    documents: DocumentStore
    store: RelationalStore
    registry: FieldSchemaRegistry
    offices: OfficeDirectory
    hierarchy: OfficeHierarchyResolver
    catalog: FormCatalog
    access: AccessPolicyEngine
    reconciler: SubmissionReconciler
    coverage: CoverageAggregator
    submissions: SubmissionSource


def build_services(documents: DocumentStore, store: RelationalStore, cfg: Settings = settings) -> Services:
    """Wire every component around one set of stores and one set of caches."""
    registry = FieldSchemaRegistry(documents, cfg.form_config_collections())
    offices = OfficeDirectory(store, TTLCache(cfg.OFFICE_CACHE_TTL_SECONDS), default_strategies(store, cfg))
    hierarchy = OfficeHierarchyResolver(
        documents,
        store,
        TTLCache(cfg.OFFICE_CACHE_TTL_SECONDS),
        employee_collection=cfg.EMPLOYEE_COLLECTION,
    )
    catalog = FormCatalog(store)
    return Services(
        documents=documents,
        store=store,
        registry=registry,
        offices=offices,
        hierarchy=hierarchy,
        catalog=catalog,
        access=AccessPolicyEngine(hierarchy, catalog),
        reconciler=SubmissionReconciler(registry),
        coverage=CoverageAggregator(registry, catalog),
        submissions=SubmissionSource(
            store,
            submissions_locator(store, cfg.submission_sources()),
            TTLCache(cfg.SUMMARY_CACHE_TTL_SECONDS),
            profile_table=cfg.USER_PROFILE_TABLE,
        ),
    )


def build_stores(cfg: Settings = settings) -> tuple[DocumentStore, RelationalStore]:
    if cfg.STORE_BACKEND == "memory":
        from fieldreports.stores.memory import InMemoryDocumentStore, InMemoryRelationalStore

        return InMemoryDocumentStore(), InMemoryRelationalStore(max_rows=cfg.RELATIONAL_MAX_ROWS)
    if cfg.STORE_BACKEND != "sql":
        raise ValueError(f"unknown STORE_BACKEND: {cfg.STORE_BACKEND!r}")

    from fieldreports.core.redis import get_redis
    from fieldreports.db.session import get_engine
    from fieldreports.stores.documents import RedisDocumentStore
    from fieldreports.stores.sql import SqlRelationalStore

    return RedisDocumentStore(get_redis()), SqlRelationalStore(get_engine(), max_rows=cfg.RELATIONAL_MAX_ROWS)


_services: Optional[Services] = None


def get_services() -> Services:
    """FastAPI dependency: the process-wide component graph (built on first use)."""
    global _services
    if _services is None:
        documents, store = build_stores()
        _services = build_services(documents, store)
        logger.info("Services built with %s stores", settings.STORE_BACKEND)
    return _services


def reset_services() -> None:
    global _services
    _services = None
