import asyncio
from typing import Dict, List, Optional
from urllib.parse import unquote

import httpx
import pytest

from portal.core.airtable import AirtableClient
from portal.core.config import Settings, load_settings
from portal.db.directory import StudentDirectory

SECRET = "test-secret"

ROSTER = [
    {"id": "rec1", "fields": {"Preferred Name": "Tamara", "Name": "S022 - Tamara Jones"}},
    {"id": "rec2", "fields": {"Preferred Name": "Luis", "Name": "S031–Luis Perez"}},
    {"id": "rec3", "fields": {"Preferred Name": "Ana", "Name": "Ana Lopez", "StudentID": "S045"}},
    {"id": "rec4", "fields": {"Name": "S050 - No Preferred Name"}},
    {"id": "rec5", "fields": {"Preferred Name": "Ghost", "Name": "Ghost"}},
    {"id": "rec6", "fields": {"Preferred Name": " tamara ", "Name": "S099 - Other Tamara"}},
]

ATTENDANCE = [
    {
        "id": "att3",
        "fields": {
            "Date": "2025-09-12",
            "Current Course (from Student)": ["Backend Bootcamp"],
            "Block A": "On Time",
            "Block B": "Tardy (1-19 min late)",
            "Block C": "Absent (20+ minutes late)",
        },
    },
    {
        "id": "att2",
        "fields": {
            "Date": "2025-09-10",
            "Current Course (from Student)": ["Backend Bootcamp"],
            "Block A": "On Time",
            "Block B": "On Time",
            "Block C": "On Time",
            "Block D": "On Time",
        },
    },
    {"id": "att1", "fields": {"Date": "2025-09-08"}},
]


class FakeAirtable:
    """Serves Airtable-shaped pages from in-memory tables and records every request."""

    def __init__(self, tables: Optional[Dict[str, List[dict]]] = None, page_size: int = 100):
        self.tables = tables if tables is not None else {
            "Students": list(ROSTER),
            "Attendance": list(ATTENDANCE),
        }
        self.page_size = page_size
        self.requests: List[httpx.Request] = []
        self.fail_status: Optional[int] = None
        self.error: Optional[Exception] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"error": {"type": "SERVER_ERROR"}})

        table = unquote(request.url.path.rsplit("/", 1)[-1])
        if table not in self.tables:
            return httpx.Response(404, json={"error": "NOT_FOUND"})

        rows = self.tables[table]
        start = int(request.url.params.get("offset", 0))
        page = rows[start:start + self.page_size]
        body = {"records": page}
        if start + self.page_size < len(rows):
            body["offset"] = str(start + self.page_size)
        return httpx.Response(200, json=body)

    def requests_for(self, table: str) -> List[httpx.Request]:
        return [r for r in self.requests if unquote(r.url.path).endswith("/" + table)]


@pytest.fixture
def settings() -> Settings:
    return load_settings(
        _env_file=None,
        PORTAL_PW_SECRET=SECRET,
        MASTER_PORTAL_PW="",
        AIRTABLE_API_KEY="patTESTKEY",
        AIRTABLE_BASE_ID="appTESTBASE",
        ALLOWED_ORIGINS="",
    )


@pytest.fixture
def fake_airtable() -> FakeAirtable:
    return FakeAirtable()


@pytest.fixture
def airtable(settings, fake_airtable):
    client = AirtableClient(settings, transport=httpx.MockTransport(fake_airtable))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def directory(settings, airtable) -> StudentDirectory:
    directory = StudentDirectory(airtable, settings)
    asyncio.run(directory.refresh())
    return directory
