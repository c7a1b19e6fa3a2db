import asyncio

import httpx
import pytest

from portal.core.airtable import AirtableClient
from portal.core.errors import UpstreamError
from tests.conftest import FakeAirtable


def _list(client, *args, **kwargs):
    return asyncio.run(client.list_records(*args, **kwargs))


def test_collects_every_page(airtable, fake_airtable):
    fake_airtable.page_size = 4
    records = _list(airtable, "Students")

    assert [r["id"] for r in records] == ["rec1", "rec2", "rec3", "rec4", "rec5", "rec6"]
    pages = fake_airtable.requests_for("Students")
    assert len(pages) == 2
    assert "offset" not in pages[0].url.params
    assert pages[1].url.params["offset"] == "4"


def test_sends_view_filter_and_sort(airtable, fake_airtable):
    _list(
        airtable,
        "Attendance",
        view="Grid view",
        filter_by_formula="TRUE()",
        sort=[("Date", "desc"), ("Name", "asc")],
    )
    params = fake_airtable.requests_for("Attendance")[0].url.params
    assert params["view"] == "Grid view"
    assert params["filterByFormula"] == "TRUE()"
    assert params["sort[0][field]"] == "Date"
    assert params["sort[0][direction]"] == "desc"
    assert params["sort[1][field]"] == "Name"
    assert params["sort[1][direction]"] == "asc"


def test_omits_empty_options(airtable, fake_airtable):
    _list(airtable, "Students", view=None)
    assert dict(fake_airtable.requests_for("Students")[0].url.params) == {}


def test_table_names_are_url_encoded(settings):
    fake = FakeAirtable(tables={"Class Roster": [{"id": "r1", "fields": {}}]})
    client = AirtableClient(settings, transport=httpx.MockTransport(fake))
    try:
        assert _list(client, "Class Roster") == [{"id": "r1", "fields": {}}]
    finally:
        asyncio.run(client.aclose())
    assert fake.requests[0].url.raw_path.startswith(b"/v0/appTESTBASE/Class%20Roster")


def test_non_success_status_raises(airtable, fake_airtable):
    fake_airtable.fail_status = 403
    with pytest.raises(UpstreamError) as exc_info:
        _list(airtable, "Students")
    error = exc_info.value
    assert error.upstream_status == 403
    assert error.to_dict() == {
        "error": "Failed to fetch from Airtable",
        "details": "Airtable responded with status 403",
    }


def test_connection_error_raises(airtable, fake_airtable):
    fake_airtable.error = httpx.ConnectError("connection refused")
    with pytest.raises(UpstreamError) as exc_info:
        _list(airtable, "Students")
    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Airtable is unreachable"


def test_non_json_body_raises(settings):
    client = AirtableClient(
        settings, transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    )
    try:
        with pytest.raises(UpstreamError):
            _list(client, "Students")
    finally:
        asyncio.run(client.aclose())
