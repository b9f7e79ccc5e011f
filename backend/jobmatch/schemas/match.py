"""Match-related Pydantic schemas."""
from typing import Optional
from pydantic import BaseModel, Field

from jobmatch.schemas.job import JobResponse
from jobmatch.schemas.profile import UserProfile


class MatchFilters(BaseModel):
    """
    Filters for a match request.

    search/location/job_type/experience_level/remote_only narrow the candidate
    pool before scoring. min_score, required_skills and limit apply to the
    scored list.
    """
    min_score: Optional[int] = Field(default=None, ge=0, le=100)
    location: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    remote_only: bool = False
    limit: Optional[int] = Field(default=None, ge=1)
    search: Optional[str] = None
    required_skills: Optional[list[str]] = None
    min_skills_match: int = Field(default=1, ge=1)


class JobMatch(JobResponse):
    """A stored job enriched with its score against one profile."""
    match_score: int
    match_reasons: list[str] = Field(default_factory=list)
    matching_skills: list[str] = Field(default_factory=list)
    skills_overlap_percentage: float = 0.0


class MatchStats(BaseModel):
    average_score: int = 0
    high_matches: int = 0  # 80+
    medium_matches: int = 0  # 50-79
    low_matches: int = 0  # <50


class MatchResult(BaseModel):
    """Ranked matches for one profile."""
    matches: list[JobMatch]
    total_jobs: int
    user_profile: UserProfile
    match_stats: MatchStats


class MatchStatistics(BaseModel):
    """Aggregate view of a profile's matches."""
    total_jobs: int
    average_score: int
    high_matches: int
    medium_matches: int
    low_matches: int
    top_skills: list[str] = Field(default_factory=list)
