"""
Jobs API endpoints.
Read-only access to the synchronized job catalogue.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobmatch.api.deps import get_job_store
from jobmatch.schemas.job import JobFilters, JobResponse
from jobmatch.services.job_store import JobStore

# Configure logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[JobResponse])
async def list_jobs(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    search: Optional[str] = Query(None, description="Substring of title, company, description or requirements"),
    location: Optional[str] = Query(None, description="Filter by location (partial match)"),
    job_type: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="Active, Inactive, Filled or Expired"),
    remote_only: bool = Query(False),
    store: JobStore = Depends(get_job_store),
):
    """
    List jobs with optional filtering.
    Returns paginated results, newest posted first.
    """
    filters = JobFilters(
        search=search,
        location=location,
        job_type=job_type,
        experience_level=experience_level,
        status=status,
        remote_only=remote_only,
        skip=skip,
        limit=limit,
    )
    jobs = await store.list_jobs(filters)

    logger.info(f"Listed {len(jobs)} jobs (filters: search={search}, status={status})")

    return jobs


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, store: JobStore = Depends(get_job_store)):
    """
    Get a specific job by ID.
    """
    job = await store.get_by_id(job_id)

    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    return job
