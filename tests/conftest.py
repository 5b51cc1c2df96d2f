"""Pytest configuration and shared fixtures."""

import os
from datetime import datetime, timedelta, timezone

import pytest

# In-process stores for every test; set BEFORE importing the app
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient

from fieldreports.core.security import sign_session
from fieldreports.main import app
from fieldreports.services.container import build_services, get_services
from fieldreports.stores.memory import InMemoryDocumentStore, InMemoryRelationalStore

NOW = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)

LEAVE_FIELDS = [
    {"id": "f_name", "label": "Employee Name", "type": "text"},
    {"id": "f_from", "label": "From Date", "type": "date"},
    {"id": "s_1", "label": "Details", "type": "section"},
    {"id": "f_days", "label": "Days", "type": "number"},
    {"id": "btn", "label": "Submit", "type": "button"},
]

EXPENSE_FIELDS = [
    {"id": "e_amount", "label": "Amount", "type": "number"},
    {"id": "e_branch", "label": "Branch", "type": "dropdown"},
]


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def office_rows() -> list[dict]:
    def row(name, reporting=None, division="Chennai Division"):
        return {
            "Office name": name,
            "Region": "Chennai",
            "Division": division,
            "Facility ID": "F-" + name.split()[0].upper(),
            "Reporting Office Nam": reporting,
        }

    return [
        row("Chennai Division"),
        row("Chennai RO", "Chennai Division"),
        row("Adyar BO", "Chennai RO"),
        row("Mylapore SO", "Chennai RO"),
        row("T Nagar SO", "Chennai RO"),
        row("Madurai RO", None, "Madurai Division"),
    ]


def submission_rows() -> list[dict]:
    return [
        {
            "id": "s1",
            "form_identifier": "leave-request",
            "user_id": "u-adyar",
            "employee_id": "E1001",
            "submission_data": {"f_name": "Priya", "f_from": "2024-03-20T00:00:00Z", "f_days": 2, "officeName": "Adyar BO"},
            "submitted_at": NOW - timedelta(hours=1),
        },
        {
            "id": "s2",
            "form_identifier": "leave-request",
            "user_id": "u-mylapore",
            "employee_id": None,
            "submission_data": {"f_name": "Ravi", "f_days": 1, "officeName": " mylapore so "},
            "submitted_at": NOW - timedelta(days=2),
        },
        {
            "id": "s3",
            "form_identifier": "expense-report",
            "user_id": "u-madurai",
            "employee_id": "E2001",
            "submission_data": {"e_amount": 1200, "e_branch": "Madurai RO", "e_note": "taxi"},
            "submitted_at": NOW - timedelta(days=20),
        },
    ]


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(
        {
            "employees": {
                "u-chennai-ro": {"officeName": "Chennai RO", "reportingOfficeName": "Chennai Division"},
                "u-division": {"officeName": "Chennai Division"},
                "u-adyar": {"officeName": "Adyar BO", "reportingOfficeName": "Chennai RO"},
                "u-nobody": {"name": "No Office"},
            },
            "formConfigs": {
                "leave-request": {"title": "Leave Request", "fields": LEAVE_FIELDS},
            },
            "forms": {
                "expense-report": {"title": "Expense Report", "fields": EXPENSE_FIELDS},
            },
        }
    )


@pytest.fixture
def store() -> InMemoryRelationalStore:
    return InMemoryRelationalStore(
        {
            "offices": office_rows(),
            "page_configurations": [
                {
                    "id": "leave-request",
                    "title": "Leave Request",
                    "selected_offices": ["Adyar BO", "Mylapore SO", "T Nagar SO"],
                    "fields": LEAVE_FIELDS,
                    "last_updated": None,
                },
                {
                    "id": "expense-report",
                    "title": "Expense Report",
                    "selected_offices": [],
                    "fields": EXPENSE_FIELDS,
                    "last_updated": None,
                },
            ],
            "dynamic_form_submissions": submission_rows(),
            "user_profile": [
                {"employeeId": "E2001", "full_name": "Karthik S", "office_name": "Madurai RO", "email": None},
                {"employeeId": "E9999", "full_name": "Not In Batch", "office_name": "Adyar BO", "email": None},
            ],
        }
    )


@pytest.fixture
def services(documents, store):
    return build_services(documents, store)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def client(services) -> TestClient:
    app.dependency_overrides[get_services] = lambda: services
    return TestClient(app)


def login(client: TestClient, user_id: str) -> TestClient:
    client.cookies.set("sid", sign_session({"user_id": user_id}))
    return client
