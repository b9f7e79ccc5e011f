from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Float, Boolean
import uuid

from jobmatch.database import Base
from jobmatch.database_types import GUID, StringList


class Profile(Base):
    """
    Job seeker profile.

    Owned by the account/profile collaborator; the matching core only reads it
    (apart from the unsubscribe flag).
    """
    __tablename__ = "profiles"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)

    # Matching inputs
    location = Column(String(255), nullable=True)
    job_title = Column(String(255), nullable=True)
    experience_level = Column(String(50), nullable=True)  # entry | mid | senior | lead | executive
    experience_years = Column(Integer, nullable=True)
    skills = Column(StringList, nullable=False, default=list)

    # Preferences
    preferred_job_types = Column(StringList, nullable=False, default=list)
    preferred_locations = Column(StringList, nullable=False, default=list)
    preferred_salary_min = Column(Float, nullable=True)
    preferred_salary_max = Column(Float, nullable=True)
    remote_preference = Column(String(50), nullable=True)  # Remote | Hybrid | On-site

    # Email notifications
    email_notifications_enabled = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def display_name(self) -> str:
        """Name used in email greetings."""
        return (self.full_name or "").strip() or "there"
