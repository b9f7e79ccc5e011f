"""Profile-related Pydantic schemas."""
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Profile fields the matcher reads."""
    id: Optional[UUID] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    location: Optional[str] = None
    job_title: Optional[str] = None
    experience_level: Optional[str] = None
    experience_years: Optional[int] = None
    skills: list[str] = Field(default_factory=list)
    preferred_job_types: list[str] = Field(default_factory=list)
    preferred_locations: list[str] = Field(default_factory=list)
    preferred_salary_min: Optional[float] = None
    preferred_salary_max: Optional[float] = None
    remote_preference: Optional[str] = None
    email_notifications_enabled: bool = True

    model_config = ConfigDict(from_attributes=True)

    @property
    def has_salary_preference(self) -> bool:
        return self.preferred_salary_min is not None or self.preferred_salary_max is not None
