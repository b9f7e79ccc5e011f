"""
Airtable REST client.
Fetches active job records and writes sync status back to the source table.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp

from jobmatch.config import Settings
from jobmatch.schemas.job import ExternalJobRecord

logger = logging.getLogger(__name__)

AIRTABLE_API_BASE = "https://api.airtable.com/v0"
ACTIVE_JOBS_FORMULA = "{Status} = 'Active'"


class AirtableError(Exception):
    """Raised when an Airtable request fails"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class AirtableConfigError(AirtableError):
    """Raised when the Airtable token or base id is missing"""
    pass


class AirtableClient:
    """
    Thin async wrapper over the Airtable records API for one table.

    The aiohttp session is owned by the caller.
    """

    def __init__(
        self,
        token: str,
        base_id: str,
        table_name: str,
        session: aiohttp.ClientSession,
        timeout_s: int = 30,
        api_base: str = AIRTABLE_API_BASE,
    ):
        if not token or not base_id:
            raise AirtableConfigError("Airtable token or base id is not configured")
        self.base_id = base_id
        self.table_name = table_name
        self.session = session
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self.api_base = api_base.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": "JobMatch/1.0 (job sync)",
        }

    @property
    def table_url(self) -> str:
        return f"{self.api_base}/{self.base_id}/{self.table_name}"

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        async with self.session.request(
            method, url, headers=self.headers, timeout=self.timeout, **kwargs
        ) as resp:
            if resp.status != 200:
                body = await resp.text(errors="ignore")
                raise AirtableError(
                    f"Airtable {method} {self.table_name} failed with status {resp.status}: {body[:200]}",
                    status=resp.status,
                )
            return await resp.json()

    async def list_records(
        self,
        filter_formula: Optional[str] = None,
        sort_field: Optional[str] = None,
        sort_direction: str = "desc",
    ) -> List[ExternalJobRecord]:
        """List every record matching the formula, following pagination offsets."""
        params: Dict[str, str] = {}
        if filter_formula:
            params["filterByFormula"] = filter_formula
        if sort_field:
            params["sort[0][field]"] = sort_field
            params["sort[0][direction]"] = sort_direction

        records: List[ExternalJobRecord] = []
        offset: Optional[str] = None
        while True:
            page_params = dict(params)
            if offset:
                page_params["offset"] = offset
            data = await self._request("GET", self.table_url, params=page_params)
            for raw in data.get("records", []):
                records.append(ExternalJobRecord(id=raw["id"], fields=raw.get("fields") or {}))
            offset = data.get("offset")
            if not offset:
                break

        return records

    async def fetch_active_records(self) -> List[ExternalJobRecord]:
        """Fetch all records with Status = Active, newest first."""
        records = await self.list_records(
            filter_formula=ACTIVE_JOBS_FORMULA,
            sort_field="Posted Date",
        )
        logger.info(f"Fetched {len(records)} active records from Airtable table {self.table_name}")
        return records

    async def fetch_record(self, record_id: str) -> Optional[ExternalJobRecord]:
        """Fetch a single record by id, or None if it does not exist."""
        try:
            data = await self._request("GET", f"{self.table_url}/{record_id}")
        except AirtableError as e:
            if e.status == 404:
                return None
            raise
        return ExternalJobRecord(id=data["id"], fields=data.get("fields") or {})

    async def update_sync_status(self, record_id: str, sync_status: str) -> None:
        """Write 'Last Sync' and 'Sync Status' back to the Airtable record."""
        payload = {
            "records": [
                {
                    "id": record_id,
                    "fields": {
                        "Last Sync": datetime.utcnow().isoformat() + "Z",
                        "Sync Status": sync_status,
                    },
                }
            ]
        }
        await self._request("PATCH", self.table_url, json=payload)


@asynccontextmanager
async def open_airtable_client(settings: Settings) -> AsyncIterator[AirtableClient]:
    """Build an AirtableClient from settings with its own aiohttp session."""
    if not settings.airtable_token or not settings.airtable_base_id:
        raise AirtableConfigError("Airtable token or base id is not configured")

    async with aiohttp.ClientSession() as session:
        yield AirtableClient(
            token=settings.airtable_token,
            base_id=settings.airtable_base_id,
            table_name=settings.airtable_table_name,
            session=session,
            timeout_s=settings.airtable_timeout_s,
        )
