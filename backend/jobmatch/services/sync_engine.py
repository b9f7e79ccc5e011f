"""
Airtable -> database job sync.

Fetches every active Airtable record, transforms and validates it, then
inserts new jobs, updates changed ones and expires jobs that disappeared from
the active set. One bad record never aborts the run, and sync_all() never
raises.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from jobmatch.models.job import DATA_SOURCE, SyncStatus
from jobmatch.schemas.job import ExternalJobRecord, NormalizedJob
from jobmatch.schemas.sync import SyncResult
from jobmatch.services.job_store import JobStore
from jobmatch.services.job_transformer import (
    job_to_airtable_fields,
    jobs_are_different,
    transform_airtable_job,
    validate_required_fields,
)

logger = logging.getLogger(__name__)

SYNC_IN_PROGRESS = "Sync already in progress"


class JobSource(Protocol):
    """What the engine needs from the external job source (AirtableClient)."""

    async def fetch_active_records(self) -> List[ExternalJobRecord]: ...

    async def fetch_record(self, record_id: str) -> Optional[ExternalJobRecord]: ...

    async def update_sync_status(self, record_id: str, sync_status: str) -> None: ...


class SyncEngine:
    """
    Reconciles the external job source into the job store.

    Records are processed strictly one after another. The optional lock makes
    the engine single-flight: share one lock between every engine that writes
    to the same store.
    """

    def __init__(
        self,
        source: Optional[JobSource],
        store: JobStore,
        rate_limit_delay: float = 0.2,
        lock: Optional[asyncio.Lock] = None,
        data_source: str = DATA_SOURCE,
    ):
        self.source = source
        self.store = store
        self.rate_limit_delay = rate_limit_delay
        self.lock = lock or asyncio.Lock()
        self.data_source = data_source

    async def sync_all(self) -> SyncResult:
        """Run one full reconciliation pass and return its result."""
        result = SyncResult(sync_date=datetime.utcnow())

        if self.lock.locked():
            logger.warning("Sync requested while another sync is running, skipping")
            result.errors.append(SYNC_IN_PROGRESS)
            return result

        async with self.lock:
            try:
                logger.info("Starting Airtable to database job sync...")
                records = await self.source.fetch_active_records()
                # Airtable allows ~5 requests/second
                if self.rate_limit_delay:
                    await asyncio.sleep(self.rate_limit_delay)
                logger.info(f"Found {len(records)} active jobs in Airtable")
            except Exception as e:
                error_message = f"Sync failed: {e}"
                logger.error(error_message, exc_info=True)
                result.errors.append(error_message)
                return result

            for record in records:
                result.total_processed += 1
                job = self._transform(record, result)
                if job is not None:
                    await self._process_job(job, result)

            await self._mark_inactive([record.id for record in records], result)

            logger.info(
                f"Sync completed: {result.added} added, {result.updated} updated, "
                f"{len(result.errors)} errors"
            )
        return result

    async def sync_record(self, record_id: str) -> SyncResult:
        """
        Re-sync one record by id. A record that no longer exists in the source
        is expired locally.
        """
        result = SyncResult(sync_date=datetime.utcnow())

        async with self.lock:
            try:
                record = await self.source.fetch_record(record_id)
            except Exception as e:
                error_message = f"Sync failed: {e}"
                logger.error(error_message, exc_info=True)
                result.errors.append(error_message)
                return result

            if record is None:
                logger.info(f"Record {record_id} no longer exists in Airtable, expiring")
                try:
                    await self.store.deactivate([record_id])
                except Exception as e:
                    error_message = f"Error expiring job {record_id}: {e}"
                    logger.error(error_message)
                    result.errors.append(error_message)
                return result

            result.total_processed = 1
            job = self._transform(record, result)
            if job is not None:
                await self._process_job(job, result)
        return result

    async def apply_webhook_payload(
        self,
        payload: Dict[str, Any],
        field_names: Optional[Dict[str, str]] = None,
    ) -> SyncResult:
        """
        Apply an Airtable webhook payload.

        Created and changed records go through the same validate/insert/update
        path as a full sync. Changed records only carry the cells that changed;
        those are laid over the stored job first. Destroyed records are expired,
        not deleted.
        Webhook cell values are keyed by field id; field_names maps those ids
        to column names (e.g. {"fldAbc123": "Title"}).
        """
        result = SyncResult(sync_date=datetime.utcnow())
        destroyed: List[str] = []

        async with self.lock:
            for changes in (payload.get("changedTablesById") or {}).values():
                for key in ("createdRecordsById", "changedRecordsById"):
                    for record_id, change in (changes.get(key) or {}).items():
                        result.total_processed += 1
                        fields = _webhook_fields(change, field_names)
                        if key == "changedRecordsById":
                            fields = await self._merge_stored_fields(record_id, fields, result)
                            if fields is None:
                                continue
                        job = self._transform(ExternalJobRecord(id=record_id, fields=fields), result)
                        if job is not None:
                            await self._process_job(job, result, acknowledge=False)
                destroyed.extend(changes.get("destroyedRecordIds") or [])

            if destroyed:
                try:
                    count = await self.store.deactivate(destroyed)
                    logger.info(f"Expired {count} jobs deleted in Airtable")
                except Exception as e:
                    error_message = f"Error expiring deleted jobs: {e}"
                    logger.error(error_message)
                    result.errors.append(error_message)

        return result

    def _transform(self, record: ExternalJobRecord, result: SyncResult) -> Optional[NormalizedJob]:
        try:
            return transform_airtable_job(record)
        except Exception as e:
            error_message = f"Error transforming job {record.id}: {e}"
            logger.error(error_message)
            result.errors.append(error_message)
            return None

    async def _merge_stored_fields(
        self, record_id: str, changed: Dict[str, Any], result: SyncResult
    ) -> Optional[Dict[str, Any]]:
        """Lay changed cells over the stored job; webhooks only carry what changed."""
        try:
            existing = await self.store.get_by_external_id(record_id)
        except Exception as e:
            error_message = f"Error processing job {record_id}: {e}"
            logger.error(error_message)
            result.errors.append(error_message)
            return None
        if existing is None:
            return changed
        fields = job_to_airtable_fields(existing)
        fields.update(changed)
        return fields

    async def _process_job(self, job: NormalizedJob, result: SyncResult, acknowledge: bool = True) -> None:
        validation = validate_required_fields(job)
        if not validation.is_valid:
            result.errors.append(f"Job {job.external_id}: {', '.join(validation.errors)}")
            logger.warning(f"Skipped invalid job {job.external_id}: {validation.errors}")
            return

        try:
            existing = await self.store.get_by_external_id(job.external_id)
            synced_at = datetime.utcnow()

            if existing is None:
                await self.store.insert(job, synced_at)
                result.added += 1
                logger.info(f"Added new job: {job.title} at {job.company}")
            elif jobs_are_different(job, existing):
                await self.store.update_by_external_id(job.external_id, job, synced_at)
                result.updated += 1
                logger.info(f"Updated job: {job.title} at {job.company}")
            else:
                synced_at = existing.last_sync_date
                logger.debug(f"No changes for job: {job.title} at {job.company}")

            job.sync_status = SyncStatus.SYNCED.value
            job.last_sync_date = synced_at
        except Exception as e:
            job.sync_status = SyncStatus.ERROR.value
            error_message = f"Error processing job {job.external_id}: {e}"
            logger.error(error_message)
            result.errors.append(error_message)
            if acknowledge:
                await self._acknowledge(job.external_id, SyncStatus.ERROR.value)
            return

        if acknowledge:
            await self._acknowledge(job.external_id, SyncStatus.SYNCED.value)

    async def _acknowledge(self, record_id: str, sync_status: str) -> None:
        try:
            await self.source.update_sync_status(record_id, sync_status)
        except Exception as e:
            logger.warning(f"Failed to update sync status for {record_id} in Airtable: {e}")

    async def _mark_inactive(self, active_ids: List[str], result: SyncResult) -> None:
        # An empty fetch must not expire the whole catalogue
        if not active_ids:
            logger.warning("No active records fetched, skipping inactive marking")
            return
        try:
            count = await self.store.mark_inactive(active_ids, data_source=self.data_source)
            if count:
                logger.info(f"Marked {count} jobs no longer active in Airtable as expired")
        except Exception as e:
            error_message = f"Error marking inactive jobs: {e}"
            logger.error(error_message)
            result.errors.append(error_message)


def _webhook_fields(change: Optional[Dict[str, Any]], field_names: Optional[Dict[str, str]]) -> Dict[str, Any]:
    cells = ((change or {}).get("current") or {}).get("cellValuesByFieldId") or {}
    if not field_names:
        return dict(cells)
    return {field_names.get(field_id, field_id): value for field_id, value in cells.items()}
