from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Text
import uuid

from jobmatch.database import Base
from jobmatch.database_types import GUID, JSONDict


class NotificationType(str, Enum):
    JOB_MATCHES = "job_matches"
    WEEKLY_DIGEST = "weekly_digest"
    SYSTEM = "system"


class Notification(Base):
    """Audit log of emails sent to (or preference changes made by) a profile."""
    __tablename__ = "notifications"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    profile_id = Column(GUID, ForeignKey("profiles.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    # "metadata" is reserved on declarative models
    details = Column("metadata", JSONDict, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
