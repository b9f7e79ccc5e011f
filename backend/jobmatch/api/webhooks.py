"""
Airtable webhook intake.

Airtable posts change payloads here; GET is used by Airtable to verify the
endpoint is reachable.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from jobmatch.api.deps import get_job_store, sync_lock
from jobmatch.config import settings
from jobmatch.services.job_store import JobStore
from jobmatch.services.sync_engine import SyncEngine

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/airtable-sync")
async def airtable_webhook(
    payload: Dict[str, Any] = Body(...),
    store: JobStore = Depends(get_job_store),
):
    """Apply created, changed and destroyed records from a webhook payload."""
    # Webhook changes are not acknowledged back to Airtable, so no source is needed
    engine = SyncEngine(None, store, rate_limit_delay=0, lock=sync_lock)
    result = await engine.apply_webhook_payload(payload, field_names=settings.airtable_field_map)

    logger.info(
        f"Webhook processed: {result.total_processed} records, {len(result.errors)} errors"
    )
    return {"success": True, "message": "Webhook processed", "result": result}


@router.get("/airtable-sync")
async def airtable_webhook_status():
    return {"message": "Airtable webhook endpoint is active."}
