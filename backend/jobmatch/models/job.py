from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Integer, Text, Boolean, Date, DateTime, Float

from jobmatch.database import Base
from jobmatch.database_types import StringList

# Tag stored on every job that came from the Airtable sync
DATA_SOURCE = "airtable"


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    REMOTE = "Remote"


class ExperienceLevel(str, Enum):
    ENTRY = "Entry"
    MID = "Mid"
    SENIOR = "Senior"
    EXECUTIVE = "Executive"


class JobStatus(str, Enum):
    """Lifecycle status of a job listing"""
    DRAFT = "Draft"
    ACTIVE = "Active"
    PAUSED = "Paused"
    EXPIRED = "Expired"
    FILLED = "Filled"


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class SyncStatus(str, Enum):
    """Reconciliation state of a job against its external record"""
    SYNCED = "synced"
    PENDING = "pending"
    ERROR = "error"
    INACTIVE = "inactive"


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Airtable record id
    external_id = Column(String, nullable=False, unique=True, index=True)

    # Job details
    title = Column(String, nullable=False)
    company = Column(String, nullable=False)
    location = Column(String, nullable=False)
    job_type = Column(String, nullable=True)  # JobType value
    experience_level = Column(String, nullable=True)  # ExperienceLevel value
    priority = Column(String, nullable=True)  # Priority value
    industry = Column(String, nullable=True)
    department = Column(String, nullable=True)
    created_by = Column(String, nullable=True)

    # Compensation
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_range = Column(String, nullable=True)  # free-text label, e.g. "Competitive"

    # Description
    description = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)
    skills_required = Column(StringList, nullable=False, default=list)
    remote_friendly = Column(Boolean, default=False, nullable=False)

    # Lifecycle
    status = Column(String, nullable=False, default=JobStatus.ACTIVE.value, index=True)
    posted_date = Column(Date, nullable=True, index=True)
    expires_date = Column(Date, nullable=True)

    # Sync metadata
    last_sync_date = Column(DateTime, nullable=True)
    sync_status = Column(String, nullable=False, default=SyncStatus.PENDING.value, index=True)
    data_source = Column(String, nullable=False, default=DATA_SOURCE)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
