"""
Sync trigger endpoints.

POST /api/jobs/sync       manual sync, returns result plus store stats
GET  /api/jobs/sync       store stats only
POST /api/cron/sync-jobs  scheduled sync
GET  /api/cron/sync-jobs  liveness
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from jobmatch.api.deps import get_job_source, get_job_store, sync_lock, verify_cron_secret
from jobmatch.config import settings
from jobmatch.schemas.sync import SyncResponse, SyncResult
from jobmatch.services.job_store import JobStore
from jobmatch.services.sync_engine import SYNC_IN_PROGRESS, JobSource, SyncEngine

logger = logging.getLogger(__name__)
router = APIRouter()


async def run_sync(source: Optional[JobSource], store: JobStore) -> SyncResult:
    """Run one sync through the shared lock. A missing source yields a failed result."""
    if source is None:
        return SyncResult(errors=["Sync failed: Airtable token or base id is not configured"])

    engine = SyncEngine(
        source,
        store,
        rate_limit_delay=settings.airtable_rate_limit_delay_ms / 1000,
        lock=sync_lock,
    )
    result = await engine.sync_all()
    if result.errors == [SYNC_IN_PROGRESS]:
        raise HTTPException(status_code=409, detail=SYNC_IN_PROGRESS)
    return result


@router.post("/jobs/sync", response_model=SyncResponse, dependencies=[Depends(verify_cron_secret)])
async def trigger_sync(
    source: Optional[JobSource] = Depends(get_job_source),
    store: JobStore = Depends(get_job_store),
):
    """
    Run a manual sync.

    Per-record failures are reported in result.errors; the request itself
    still succeeds.

    Returns:
        200: Sync ran
        401: Bad secret
        409: Another sync is running
    """
    logger.info("Starting manual job sync...")
    result = await run_sync(source, store)

    return SyncResponse(
        success=True,
        result=result,
        stats=await store.get_sync_stats(),
        last_sync_date=await store.get_last_sync_date(),
    )


@router.get("/jobs/sync", response_model=SyncResponse)
async def get_sync_status(store: JobStore = Depends(get_job_store)):
    """Current sync statistics and last sync date."""
    return SyncResponse(
        success=True,
        stats=await store.get_sync_stats(),
        last_sync_date=await store.get_last_sync_date(),
    )


@router.post("/cron/sync-jobs", response_model=SyncResponse, dependencies=[Depends(verify_cron_secret)])
async def cron_sync(
    source: Optional[JobSource] = Depends(get_job_source),
    store: JobStore = Depends(get_job_store),
):
    """Scheduled sync entry point."""
    logger.info("Starting automated job sync via cron...")
    result = await run_sync(source, store)
    logger.info(f"Automated sync completed: {result.added} added, {result.updated} updated")
    return SyncResponse(success=True, result=result)


@router.get("/cron/sync-jobs")
async def cron_status():
    return {"message": "Cron endpoint is active", "timestamp": datetime.utcnow()}
