from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

import fieldreports.db.models  # noqa: F401
from fieldreports.core.config import settings
from fieldreports.db.base import Base
from fieldreports.db.models import FormSubmission, Office, PageConfiguration
from fieldreports.stores.documents import RedisDocumentStore

OFFICES = [
    # (office, region, division, facility id, reporting office)
    ("Chennai Division", "Chennai", "Chennai Division", "F-0001", None),
    ("Chennai RO", "Chennai", "Chennai Division", "F-0100", "Chennai Division"),
    ("Adyar BO", "Chennai", "Chennai Division", "F-0101", "Chennai RO"),
    ("Mylapore SO", "Chennai", "Chennai Division", "F-0102", "Chennai RO"),
    ("T Nagar SO", "Chennai", "Chennai Division", "F-0103", "Chennai RO"),
    ("Madurai RO", "Madurai", "Madurai Division", "F-0200", None),
]

LEAVE_FIELDS = [
    {"id": "f_name", "label": "Employee Name", "type": "text"},
    {"id": "f_from", "label": "From Date", "type": "date"},
    {"id": "f_days", "label": "Days", "type": "number"},
    {"id": "s_1", "label": "Details", "type": "section"},
    {"id": "officeName", "label": "Office", "type": "dropdown"},
]

EMPLOYEES = {
    "u-chennai-ro": {"officeName": "Chennai RO", "reportingOfficeName": "Chennai Division"},
    "u-chennai-div": {"officeName": "Chennai Division", "reportingOfficeName": None},
    "u-adyar": {"officeName": "Adyar BO", "reportingOfficeName": "Chennai RO"},
}


async def seed_relational(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    now = datetime.now(timezone.utc)
    Session = async_sessionmaker(engine, expire_on_commit=False)
    async with Session() as db:
        if await db.get(PageConfiguration, "leave-request") is not None:
            return
        for i, (name, region, division, facility, reporting) in enumerate(OFFICES, start=1):
            db.add(
                Office(
                    id=i,
                    office_name=name,
                    region=region,
                    division=division,
                    facility_id=facility,
                    reporting_office_name=reporting,
                )
            )
        db.add(
            PageConfiguration(
                id="leave-request",
                title="Leave Request",
                selected_offices=["Adyar BO", "Mylapore SO", "T Nagar SO"],
                fields=LEAVE_FIELDS,
                last_updated=now,
            )
        )
        db.add(
            FormSubmission(
                id="sub-1",
                form_identifier="leave-request",
                user_id="u-adyar",
                employee_id="E1001",
                submission_data={
                    "f_name": "Priya",
                    "f_from": (now + timedelta(days=3)).isoformat(),
                    "f_days": 2,
                    "officeName": "Adyar BO",
                },
                submitted_at=now - timedelta(hours=2),
            )
        )
        await db.commit()


async def seed_documents(store: RedisDocumentStore) -> None:
    for user_id, doc in EMPLOYEES.items():
        await store.put(settings.EMPLOYEE_COLLECTION, user_id, doc)
    await store.put(
        settings.form_config_collections()[0],
        "leave-request",
        {"title": "Leave Request", "fields": LEAVE_FIELDS},
    )


async def main_async() -> int:
    from fieldreports.core.redis import close_redis, get_redis
    from fieldreports.db.session import dispose_engine, get_engine

    try:
        await seed_relational(get_engine())
        await seed_documents(RedisDocumentStore(get_redis()))
    finally:
        await dispose_engine()
        await close_redis()
    print("Sample seed applied successfully.")
    return 0


def main() -> int:
    # Allow manual execution:
    #   python -m fieldreports.scripts.seed_sample
    return asyncio.run(main_async())


if __name__ == "__main__":
    raise SystemExit(main())
