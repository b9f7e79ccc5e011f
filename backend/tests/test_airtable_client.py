"""
Tests for the Airtable REST client using a scripted aiohttp session.
"""
import pytest

from jobmatch.config import Settings
from jobmatch.services.airtable import (
    ACTIVE_JOBS_FORMULA,
    AirtableClient,
    AirtableConfigError,
    AirtableError,
    open_airtable_client,
)


class FakeResponse:
    def __init__(self, status, payload):
        self.status = status
        self.payload = payload

    async def json(self):
        return self.payload

    async def text(self, errors="strict"):
        return str(self.payload)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Replays queued (status, payload) responses and records each request."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        status, payload = self.responses.pop(0)
        return FakeResponse(status, payload)


def _client(session) -> AirtableClient:
    return AirtableClient(token="pat123", base_id="appBase", table_name="Jobs", session=session)


@pytest.mark.asyncio
async def test_fetch_active_records_follows_pagination():
    session = FakeSession([
        (200, {"records": [{"id": "rec1", "fields": {"Title": "A"}}], "offset": "page2"}),
        (200, {"records": [{"id": "rec2", "fields": {"Title": "B"}}]}),
    ])

    records = await _client(session).fetch_active_records()

    assert [record.id for record in records] == ["rec1", "rec2"]
    assert records[1].fields == {"Title": "B"}

    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "https://api.airtable.com/v0/appBase/Jobs"
    assert kwargs["params"]["filterByFormula"] == ACTIVE_JOBS_FORMULA
    assert kwargs["params"]["sort[0][field]"] == "Posted Date"
    assert kwargs["headers"]["Authorization"] == "Bearer pat123"
    assert session.calls[1][2]["params"]["offset"] == "page2"


@pytest.mark.asyncio
async def test_error_status_raises():
    session = FakeSession([(422, {"error": "INVALID_FILTER_BY_FORMULA"})])

    with pytest.raises(AirtableError) as exc_info:
        await _client(session).fetch_active_records()

    assert exc_info.value.status == 422


@pytest.mark.asyncio
async def test_fetch_record_not_found_returns_none():
    session = FakeSession([(404, {"error": "NOT_FOUND"})])
    assert await _client(session).fetch_record("recMissing") is None

    session = FakeSession([(200, {"id": "rec1", "fields": {"Title": "A"}})])
    record = await _client(session).fetch_record("rec1")
    assert record.id == "rec1"
    assert session.calls[0][1].endswith("/Jobs/rec1")


@pytest.mark.asyncio
async def test_update_sync_status_patches_record():
    session = FakeSession([(200, {"records": []})])

    await _client(session).update_sync_status("rec1", "synced")

    method, _, kwargs = session.calls[0]
    assert method == "PATCH"
    record = kwargs["json"]["records"][0]
    assert record["id"] == "rec1"
    assert record["fields"]["Sync Status"] == "synced"
    assert record["fields"]["Last Sync"].endswith("Z")


def test_missing_credentials():
    with pytest.raises(AirtableConfigError):
        AirtableClient(token="", base_id="appBase", table_name="Jobs", session=FakeSession([]))


@pytest.mark.asyncio
async def test_open_client_requires_config():
    with pytest.raises(AirtableConfigError):
        async with open_airtable_client(Settings(airtable_token=None, airtable_base_id=None)):
            pass
