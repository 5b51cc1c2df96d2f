import copy

import pytest

from conftest import submission_rows
from fieldreports.services.field_schema import FieldSchemaRegistry
from fieldreports.services.reconcile import SubmissionReconciler, form_type_display
from fieldreports.services.types import Submission


@pytest.fixture
def reconciler(documents):
    return SubmissionReconciler(FieldSchemaRegistry(documents, ["pages", "formConfigs", "forms"]))


@pytest.fixture
def batch():
    return [Submission.from_row(r) for r in submission_rows()]


async def test_columns_follow_first_seen_order(reconciler, batch):
    table = await reconciler.reconcile(batch)
    assert [c.key for c in table.columns] == [
        "form_type",
        "submitted_at",
        "Employee Name",
        "From Date",
        "Days",
        "Amount",
        "Branch",
        "e_note",
    ]
    assert table.columns[0].kind == "form_type"
    assert table.columns[1].kind == "date"


async def test_rows_carry_relabelled_display_values(reconciler, batch):
    table = await reconciler.reconcile(batch)
    first = table.rows[0]

    assert first["id"] == "s1"
    assert first["form_type"] == "Leave Request"
    assert first["submitted_at"] == "03/15/2024 09:30"
    assert first["office"] == "Adyar BO"
    assert first["values"] == {
        "Employee Name": "Priya",
        "From Date": "03/20/2024",
        "Days": 2,
        "Amount": "",
        "Branch": "",
        "e_note": "",
    }

    assert table.rows[2]["office"] == "Madurai RO"
    assert table.rows[2]["values"]["e_note"] == "taxi"


async def test_office_field_is_kept_out_of_columns(reconciler, batch):
    table = await reconciler.reconcile(batch)
    assert "officeName" not in {c.key for c in table.columns}
    assert all("officeName" not in r["values"] for r in table.rows)


async def test_unknown_form_keeps_raw_field_ids(reconciler):
    sub = Submission.from_row(
        {"id": "x", "form_identifier": "site-visit", "submission_data": {"q1": "yes", "q2": ["a", "b"]}}
    )
    table = await reconciler.reconcile([sub])
    assert [c.key for c in table.columns][2:] == ["q1", "q2"]
    assert table.rows[0]["values"] == {"q1": "yes", "q2": ["a", "b"]}
    assert table.rows[0]["form_type"] == "Site Visit"
    assert table.rows[0]["office"] == "Unknown Office"


async def test_reconcile_is_idempotent_and_pure(reconciler, batch):
    before = copy.deepcopy([s.submission_data for s in batch])
    first = await reconciler.reconcile(batch)
    second = await reconciler.reconcile(batch)

    assert first == second
    assert [s.submission_data for s in batch] == before


async def test_empty_batch(reconciler):
    table = await reconciler.reconcile([])
    assert [c.key for c in table.columns] == ["form_type", "submitted_at"]
    assert table.rows == ()


def test_form_type_display():
    assert form_type_display("it-support-request") == "IT Support Request"
    assert form_type_display("test") == "Test Form"
    assert form_type_display("monthly-site-audit") == "Monthly Site Audit"
    assert form_type_display("qa-checkList") == "Qa CheckList"


async def test_every_row_has_a_cell_for_every_column(reconciler, batch):
    table = await reconciler.reconcile(batch)
    keys = [c.key for c in table.columns if c.kind == "field"]

    for row in table.rows:
        assert list(row["values"]) == keys

    assert table.rows[1]["values"]["From Date"] == ""
    assert table.rows[2]["values"]["Employee Name"] == ""


async def test_null_values_are_blank(reconciler):
    sub = Submission.from_row(
        {"id": "x", "form_identifier": "site-visit", "submission_data": {"q1": None, "q2": 0}}
    )
    table = await reconciler.reconcile([sub])
    assert table.rows[0]["values"] == {"q1": "", "q2": 0}
