"""
Worker entrypoint for scheduled job sync.
Runs one full Airtable sync (or a single record with a record id) and exits.

    python -m jobmatch.worker            # full sync
    python -m jobmatch.worker recXXXX    # one record
"""
import asyncio
import logging
import sys
from typing import Optional

from jobmatch import database
from jobmatch.config import settings
from jobmatch.schemas.sync import SyncResult
from jobmatch.services.airtable import open_airtable_client
from jobmatch.services.job_store import JobStore
from jobmatch.services.sync_engine import SyncEngine

logger = logging.getLogger(__name__)


async def worker_main(record_id: Optional[str] = None) -> SyncResult:
    async with open_airtable_client(settings) as client:
        async with database.AsyncSessionLocal() as db:
            engine = SyncEngine(
                client,
                JobStore(db),
                rate_limit_delay=settings.airtable_rate_limit_delay_ms / 1000,
            )
            if record_id:
                result = await engine.sync_record(record_id)
            else:
                result = await engine.sync_all()
    await database.engine.dispose()

    print(f"Sync finished: {result.added} added, {result.updated} updated, {result.total_processed} processed")
    for error in result.errors:
        print(f"  error: {error}")
    return result


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    result = asyncio.run(worker_main(sys.argv[1] if len(sys.argv) > 1 else None))
    exit(1 if result.errors else 0)
