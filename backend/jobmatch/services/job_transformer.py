"""
Airtable record transformer.
Turns raw Airtable job records into normalized jobs, validates them and
decides whether a stored job needs updating.
"""
import re
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Iterable, List, Optional

from jobmatch.models.job import (
    DATA_SOURCE,
    ExperienceLevel,
    JobStatus,
    JobType,
    Priority,
    SyncStatus,
)
from jobmatch.schemas.job import ExternalJobRecord, NormalizedJob, ValidationResult

VALID_JOB_TYPES = {t.value for t in JobType}
VALID_EXPERIENCE_LEVELS = {level.value for level in ExperienceLevel}
VALID_STATUSES = {s.value for s in JobStatus}
VALID_PRIORITIES = {p.value for p in Priority}

# Fields compared when deciding if a stored job is stale.
# Ids and sync metadata are left out on purpose.
FIELDS_TO_COMPARE = (
    "title", "company", "location", "job_type", "experience_level",
    "salary_min", "salary_max", "salary_range", "description", "requirements",
    "status", "posted_date", "expires_date", "industry", "department",
    "remote_friendly", "priority",
)

_WHITESPACE = re.compile(r"\s+")


def sanitize_text(value: Any) -> str:
    """Trim and collapse whitespace runs. Missing values become ''."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip()


def _validate_choice(value: Any, allowed: set) -> Optional[str]:
    return value if isinstance(value, str) and value in allowed else None


def validate_job_type(value: Any) -> Optional[str]:
    return _validate_choice(value, VALID_JOB_TYPES)


def validate_experience_level(value: Any) -> Optional[str]:
    return _validate_choice(value, VALID_EXPERIENCE_LEVELS)


def validate_priority(value: Any) -> Optional[str]:
    return _validate_choice(value, VALID_PRIORITIES)


def validate_status(value: Any) -> str:
    """Unknown or missing status falls back to Active."""
    return _validate_choice(value, VALID_STATUSES) or JobStatus.ACTIVE.value


def validate_salary(value: Any) -> Optional[float]:
    """Non-negative number rounded half-up to 2 decimals, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    try:
        return float(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # too many digits to hold at cent precision
        return None


def parse_date(value: Any) -> Optional[date]:
    """
    Parse an Airtable date or datetime into a calendar date.

    Datetimes with an offset are converted to UTC first. Anything unparseable
    is dropped.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc)
        except OverflowError:
            return None
    return parsed.date()


def parse_skills(value: Any) -> List[str]:
    """Split a comma-separated skills string, keeping order and duplicates."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        tokens = value
    else:
        tokens = str(value).split(",")
    return [skill for skill in (str(token).strip() for token in tokens) if skill]


def transform_airtable_job(record: ExternalJobRecord) -> NormalizedJob:
    """Transform one Airtable record into a NormalizedJob. Never raises on bad field values."""
    fields = record.fields or {}

    return NormalizedJob(
        external_id=record.id,
        title=sanitize_text(fields.get("Title")),
        company=sanitize_text(fields.get("Company")),
        location=sanitize_text(fields.get("Location")),
        job_type=validate_job_type(fields.get("Job Type")),
        experience_level=validate_experience_level(fields.get("Experience Level")),
        salary_min=validate_salary(fields.get("Salary Min")),
        salary_max=validate_salary(fields.get("Salary Max")),
        salary_range=sanitize_text(fields.get("Salary Range")) or None,
        description=sanitize_text(fields.get("Description")),
        requirements=sanitize_text(fields.get("Requirements")),
        status=validate_status(fields.get("Status")),
        posted_date=parse_date(fields.get("Posted Date")),
        expires_date=parse_date(fields.get("Expires Date")),
        created_by=sanitize_text(fields.get("Created By")),
        industry=sanitize_text(fields.get("Industry")),
        department=sanitize_text(fields.get("Department")),
        remote_friendly=bool(fields.get("Remote Friendly")),
        skills_required=parse_skills(fields.get("Skills Required")),
        priority=validate_priority(fields.get("Priority")),
        sync_status=SyncStatus.PENDING.value,
        data_source=DATA_SOURCE,
    )


def transform_airtable_jobs(records: Iterable[ExternalJobRecord]) -> List[NormalizedJob]:
    return [transform_airtable_job(record) for record in records]


# Airtable column -> job attribute, used to rebuild a record from a stored job
AIRTABLE_FIELDS = {
    "Title": "title",
    "Company": "company",
    "Location": "location",
    "Job Type": "job_type",
    "Experience Level": "experience_level",
    "Salary Min": "salary_min",
    "Salary Max": "salary_max",
    "Salary Range": "salary_range",
    "Description": "description",
    "Requirements": "requirements",
    "Status": "status",
    "Posted Date": "posted_date",
    "Expires Date": "expires_date",
    "Created By": "created_by",
    "Industry": "industry",
    "Department": "department",
    "Remote Friendly": "remote_friendly",
    "Skills Required": "skills_required",
    "Priority": "priority",
}


def job_to_airtable_fields(job: Any) -> dict:
    """
    Rebuild Airtable-style cell values from a stored job.

    transform_airtable_job() of the result gives back the same job, so partial
    changes can be laid over it.
    """
    fields = {}
    for column, attribute in AIRTABLE_FIELDS.items():
        value = getattr(job, attribute, None)
        if value is None:
            continue
        if isinstance(value, date):
            value = value.isoformat()
        fields[column] = value
    return fields


def validate_required_fields(job: NormalizedJob) -> ValidationResult:
    """Check required fields and cross-field invariants, collecting every violation."""
    errors = []

    if not (job.title or "").strip():
        errors.append("Title is required")
    if not (job.company or "").strip():
        errors.append("Company is required")
    if not (job.location or "").strip():
        errors.append("Location is required")

    if job.salary_min is not None and job.salary_max is not None and job.salary_min > job.salary_max:
        errors.append("Salary minimum cannot be greater than salary maximum")

    if job.posted_date and job.expires_date and job.posted_date > job.expires_date:
        errors.append("Posted date cannot be after expires date")

    return ValidationResult(is_valid=not errors, errors=errors)


def jobs_are_different(job1: Any, job2: Any) -> bool:
    """
    Compare two jobs (NormalizedJob, JobResponse or Job rows).

    Skills are compared order-insensitively; duplicates still count.
    """
    for field in FIELDS_TO_COMPARE:
        if getattr(job1, field, None) != getattr(job2, field, None):
            return True

    skills1 = sorted(getattr(job1, "skills_required", None) or [])
    skills2 = sorted(getattr(job2, "skills_required", None) or [])
    return skills1 != skills2
