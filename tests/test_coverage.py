from datetime import datetime, timezone

from conftest import submission_rows
from fieldreports.services.types import Submission


def sub(sub_id, form_id, data):
    return Submission(
        id=sub_id,
        form_identifier=form_id,
        submission_data=data,
        submitted_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


async def test_completed_and_pending_for_a_form(services):
    batch = [Submission.from_row(r) for r in submission_rows()]
    coverage = await services.coverage.compute_coverage("leave-request", batch)

    assert coverage.completed == ("Adyar BO", "Mylapore SO")
    assert coverage.pending == ("T Nagar SO",)
    assert coverage.total_targets == 3
    assert coverage.completed_count == 2
    assert coverage.pending_count == 1


async def test_spelling_variants_complete_the_target(services, store):
    store.insert(
        "page_configurations",
        {"id": "audit", "title": "Audit", "selected_offices": ["Chennai RO", "Adyar BO"], "fields": []},
    )
    batch = [
        sub("1", "audit", {"officeName": "chennai ro"}),
        sub("2", "audit", {"office": " Chennai RO "}),
        sub("3", "audit", {"notes": "visited", "where": "CHENNAI RO"}),
    ]
    coverage = await services.coverage.compute_coverage("audit", batch)

    assert coverage.completed == ("Chennai RO",)
    assert coverage.pending == ("Adyar BO",)
    assert set(coverage.completed).isdisjoint(coverage.pending)


async def test_relabelled_office_field_is_found(services):
    batch = [sub("1", "expense-report", {"e_amount": 5, "e_branch": "Mylapore SO"})]
    coverage = await services.coverage.compute_coverage(None, batch)
    assert coverage.completed == ("Mylapore SO",)


async def test_no_form_lists_every_office_seen(services):
    batch = [Submission.from_row(r) for r in submission_rows()]
    coverage = await services.coverage.compute_coverage(None, batch)

    assert coverage.completed == ("Adyar BO", "Madurai RO", "mylapore so")
    assert coverage.pending == ()
    assert coverage.total_targets is None


async def test_timestamps_are_not_taken_for_offices(services):
    batch = [sub("1", "site-visit", {"when": "2024-03-01T10:00:00 Office hours", "site": "Adyar BO"})]
    coverage = await services.coverage.compute_coverage(None, batch)
    assert coverage.completed == ("Adyar BO",)


async def test_unknown_form_falls_back_to_offices_seen(services):
    coverage = await services.coverage.compute_coverage("missing", [sub("1", "missing", {"Branch": "Adyar BO"})])
    assert coverage.completed == ("Adyar BO",)
    assert coverage.total_targets is None
