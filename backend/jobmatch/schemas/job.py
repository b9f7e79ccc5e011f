"""Job-related Pydantic schemas."""
from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from jobmatch.models.job import DATA_SOURCE, JobStatus, SyncStatus


class ExternalJobRecord(BaseModel):
    """Raw Airtable record: record id plus the field bag keyed by column name."""
    id: str
    fields: dict[str, Any] = Field(default_factory=dict)


class JobBase(BaseModel):
    """Base schema with common job fields."""
    external_id: str
    title: str
    company: str
    location: str
    job_type: Optional[str] = None  # Full-time | Part-time | Contract | Remote
    experience_level: Optional[str] = None  # Entry | Mid | Senior | Executive
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_range: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    status: str = JobStatus.ACTIVE.value
    posted_date: Optional[date] = None
    expires_date: Optional[date] = None
    created_by: Optional[str] = None
    industry: Optional[str] = None
    department: Optional[str] = None
    remote_friendly: bool = False
    skills_required: list[str] = Field(default_factory=list)
    priority: Optional[str] = None  # High | Medium | Low
    last_sync_date: Optional[datetime] = None
    sync_status: str = SyncStatus.PENDING.value
    data_source: str = DATA_SOURCE


class NormalizedJob(JobBase):
    """
    A transformed Airtable record, not yet persisted.

    sync_status starts as "pending" and only moves to "synced" or "error"
    once the store write has been attempted.
    """

    def to_row(self) -> dict[str, Any]:
        """Column values written to the jobs table (sync metadata excluded)."""
        return self.model_dump(exclude={"last_sync_date", "sync_status"})


class JobResponse(JobBase):
    """Schema for a stored job."""
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class JobFilters(BaseModel):
    """Filters for listing stored jobs."""
    search: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    status: Optional[str] = None
    remote_only: bool = False
    skip: int = 0
    limit: Optional[int] = None


class ValidationResult(BaseModel):
    """Outcome of required-field validation for a job."""
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
