from unittest.mock import AsyncMock

from fieldreports.services.field_schema import FieldSchemaRegistry

COLLECTIONS = ["pages", "formConfigs", "forms"]


async def test_mapping_skips_structural_fields(documents):
    registry = FieldSchemaRegistry(documents, COLLECTIONS)
    mapping = await registry.get_field_mapping("leave-request")
    assert mapping == {"f_name": "Employee Name", "f_from": "From Date", "f_days": "Days"}
    assert list(mapping) == ["f_name", "f_from", "f_days"]


async def test_collections_are_tried_in_order(documents):
    documents.put("pages", "leave-request", {"title": "Old", "fields": []})
    registry = FieldSchemaRegistry(documents, COLLECTIONS)

    # empty field list in "pages" does not win
    config = await registry.get_form_config("leave-request")
    assert config.title == "Leave Request"

    # later collection found for another form
    config = await registry.get_form_config("expense-report")
    assert [f.id for f in config.fields] == ["e_amount", "e_branch"]


async def test_failing_collection_is_skipped():
    documents = AsyncMock()
    documents.get.side_effect = [
        RuntimeError("permission denied"),
        {"fields": [{"id": "a", "label": "A", "type": "text"}]},
    ]
    registry = FieldSchemaRegistry(documents, COLLECTIONS)

    assert await registry.get_field_mapping("f") == {"a": "A"}


async def test_unknown_form_has_empty_mapping_and_config_is_not_cached(documents):
    registry = FieldSchemaRegistry(documents, COLLECTIONS)
    assert await registry.get_form_config("nope") is None
    assert await registry.get_field_mapping("nope") == {}

    documents.put("forms", "nope", {"fields": [{"id": "x", "label": "X"}]})
    assert (await registry.get_form_config("nope")).fields[0].label == "X"


async def test_mapping_never_raises():
    documents = AsyncMock()
    documents.get.side_effect = RuntimeError("down")
    registry = FieldSchemaRegistry(documents, COLLECTIONS)
    assert await registry.get_field_mapping("leave-request") == {}


async def test_mapping_is_cached_until_cleared(documents):
    registry = FieldSchemaRegistry(documents, COLLECTIONS)
    await registry.get_field_mapping("leave-request")
    documents.put("formConfigs", "leave-request", {"fields": [{"id": "f_name", "label": "Name"}]})

    assert (await registry.get_field_mapping("leave-request"))["f_name"] == "Employee Name"

    registry.clear_cache()
    assert await registry.get_field_mapping("leave-request") == {"f_name": "Name"}


async def test_convert_relabels_keys_and_keeps_unknown_ids(documents):
    registry = FieldSchemaRegistry(documents, COLLECTIONS)
    raw = {"f_name": "Priya", "f_tags": ["a", "b"], "f_days": 2}

    converted = await registry.convert_submission_data("leave-request", raw)

    assert converted == {"Employee Name": "Priya", "f_tags": ["a", "b"], "Days": 2}
    assert raw == {"f_name": "Priya", "f_tags": ["a", "b"], "f_days": 2}


async def test_all_field_labels(documents):
    registry = FieldSchemaRegistry(documents, COLLECTIONS)
    labels = await registry.get_all_field_labels(["leave-request", "expense-report", "missing"])
    assert labels == {"Employee Name", "From Date", "Days", "Amount", "Branch"}
