from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

import fieldreports.db.models  # noqa: F401
from conftest import office_rows
from fieldreports.core.errors import BackendUnavailable
from fieldreports.db.base import Base
from fieldreports.db.models import FormSubmission, Office, PageConfiguration, UserProfile
from fieldreports.db.session import build_engine
from fieldreports.services.container import build_services
from fieldreports.stores.base import eq, ilike, is_in
from fieldreports.stores.memory import InMemoryDocumentStore
from fieldreports.stores.sql import SqlRelationalStore


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'reports.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    Session = async_sessionmaker(engine, expire_on_commit=False)
    async with Session() as db:
        for i, row in enumerate(office_rows(), start=1):
            db.add(
                Office(
                    id=i,
                    office_name=row["Office name"],
                    region=row["Region"],
                    division=row["Division"],
                    facility_id=row["Facility ID"],
                    reporting_office_name=row["Reporting Office Nam"],
                )
            )
        db.add(
            PageConfiguration(
                id="leave-request",
                title="Leave Request",
                selected_offices=["Adyar BO"],
                fields=[{"id": "f_name", "label": "Employee Name", "type": "text"}],
            )
        )
        db.add(
            FormSubmission(
                id="s1",
                form_identifier="leave-request",
                user_id="u-adyar",
                employee_id="E1001",
                submission_data={"f_name": "Priya", "officeName": "Adyar BO"},
                submitted_at=datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc),
            )
        )
        db.add(UserProfile(employee_id="E1001", full_name="Priya Raman", office_name="Adyar BO"))
        await db.commit()

    yield engine
    await engine.dispose()


async def test_select_with_filters_order_and_range(engine):
    store = SqlRelationalStore(engine)

    rows = await store.select("offices", ["Office name"], filters=[eq("Reporting Office Nam", "Chennai RO")], order_by="Office name")
    assert [r["Office name"] for r in rows] == ["Adyar BO", "Mylapore SO", "T Nagar SO"]

    rows = await store.select("offices", ["Office name"], order_by="Office name", descending=True, start=1, end=2)
    assert [r["Office name"] for r in rows] == ["Mylapore SO", "Madurai RO"]

    rows = await store.select("offices", filters=[ilike("Office name", "%nagar%")])
    assert rows[0]["Facility ID"] == "F-T"

    assert await store.count("offices") == 6
    assert await store.count("offices", filters=[eq("Division", "Madurai Division")]) == 1


async def test_row_cap_truncates_silently(engine):
    store = SqlRelationalStore(engine, max_rows=4)
    assert len(await store.select("offices", start=0, end=49999)) == 4


async def test_missing_relation_and_column(engine):
    store = SqlRelationalStore(engine)
    with pytest.raises(BackendUnavailable):
        await store.count("reports_data_view")
    with pytest.raises(BackendUnavailable):
        await store.select("offices", ["Office Name Typo"])


async def test_services_over_sql(engine):
    store = SqlRelationalStore(engine)
    documents = InMemoryDocumentStore(
        {
            "employees": {"u-chennai-ro": {"officeName": "Chennai RO"}},
            "pages": {"leave-request": {"fields": [{"id": "f_name", "label": "Employee Name"}]}},
        }
    )
    services = build_services(documents, store)

    assert "Chennai Division" in await services.offices.fetch_office_names()
    assert len((await services.hierarchy.resolve_user_offices("u-chennai-ro")).names) == 4
    assert await services.catalog.get_form_targets("leave-request") == ("Adyar BO",)

    subs = await services.submissions.fetch_submissions()
    assert subs[0].submission_data["f_name"] == "Priya"
    assert subs[0].user_office == "Adyar BO"
    assert subs[0].user_name == "Priya Raman"

    table = await services.reconciler.reconcile(subs)
    assert table.rows[0]["values"] == {"Employee Name": "Priya"}


async def test_in_filter(engine):
    store = SqlRelationalStore(engine)
    rows = await store.select("offices", ["Office name"], filters=[is_in("Office name", ["Adyar BO", "Madurai RO", "Nowhere"])], order_by="Office name")
    assert [r["Office name"] for r in rows] == ["Adyar BO", "Madurai RO"]
