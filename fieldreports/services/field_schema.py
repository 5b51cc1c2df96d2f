from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from fieldreports.core.cache import TTLCache
from fieldreports.stores.base import DocumentStore
from fieldreports.services.types import FormConfig
from fieldreports.utils.schema import label_map, parse_fields

logger = logging.getLogger("fieldreports.field_schema")


class FieldSchemaRegistry:
    """Resolves a form identifier to its field list and field id -> label map.

    Form schemas may live under any of several document collections
    (authoring tools have used different namespaces); they are tried in
    order and the first document with a non-empty field list wins.

    Both caches have no TTL: schemas rarely change, `clear_cache()` is the
    only way to drop them.
    """

    def __init__(
        self,
        documents: DocumentStore,
        collections: Sequence[str],
        *,
        config_cache: TTLCache[str, FormConfig] | None = None,
        mapping_cache: TTLCache[str, dict[str, str]] | None = None,
    ) -> None:
        self.documents = documents
        self.collections = list(collections)
        self._configs = config_cache if config_cache is not None else TTLCache()
        self._mappings = mapping_cache if mapping_cache is not None else TTLCache()

    async def get_form_config(self, form_id: str) -> FormConfig | None:
        cached = self._configs.get(form_id)
        if cached is not None:
            return cached

        for collection in self.collections:
            try:
                doc = await self.documents.get(collection, form_id)
            except Exception as exc:
                logger.info("Schema lookup %s/%s failed: %s", collection, form_id, exc)
                continue
            if not doc:
                continue
            fields = parse_fields(doc.get("fields"))
            if not fields:
                continue
            config = FormConfig(id=form_id, title=doc.get("title"), fields=fields)
            logger.debug("Found schema for %s in %s (%d fields)", form_id, collection, len(fields))
            self._configs.set(form_id, config)
            return config

        logger.info("No schema found for form %s", form_id)
        return None

    async def get_field_mapping(self, form_id: str) -> dict[str, str]:
        cached = self._mappings.get(form_id)
        if cached is not None:
            return cached
        try:
            config = await self.get_form_config(form_id)
        except Exception:
            logger.exception("Building field mapping for %s failed", form_id)
            return {}
        mapping = label_map(config.fields) if config else {}
        self._mappings.set(form_id, mapping)
        return mapping

    async def get_all_field_labels(self, form_ids: Iterable[str]) -> set[str]:
        labels: set[str] = set()
        for form_id in form_ids:
            labels.update((await self.get_field_mapping(form_id)).values())
        return labels

    async def convert_submission_data(self, form_id: str, raw: dict[str, Any]) -> dict[str, Any]:
        """Relabel every key; unlabelled field ids are kept under their raw id."""
        mapping = await self.get_field_mapping(form_id)
        return {mapping.get(field_id, field_id): value for field_id, value in raw.items()}

    def clear_cache(self) -> None:
        self._configs.invalidate()
        self._mappings.invalidate()
        logger.info("Field schema cache cleared")
