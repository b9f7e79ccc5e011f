"""
Job matching service.
Scores stored jobs against a user profile, ranks them and filters the result.

Scoring is additive and capped at 100:
- Skills overlap: up to 50 points (overlap % * 0.5)
- Location: 25 exact, 20 partial, 15 remote-friendly location
- Experience level: 15 exact, 10 overqualified, 5 one level under
- Remote preference: +10
- Recency: +5 within 7 days, +3 within 30 days
- Salary signal: +5 for "competitive"/"market" salary text
- Preferred job type: +8
"""
import logging
import math
from collections import Counter
from datetime import date
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from jobmatch.schemas.job import JobResponse
from jobmatch.schemas.match import (
    JobMatch,
    MatchFilters,
    MatchResult,
    MatchStatistics,
    MatchStats,
)
from jobmatch.schemas.profile import UserProfile
from jobmatch.services.job_store import JobStore, ProfileStore

logger = logging.getLogger(__name__)

MAX_SKILLS_POINTS = 50
SKILLS_POINTS_PER_PERCENT = 0.5

EXPERIENCE_HIERARCHY = {
    "entry": 1,
    "mid": 2,
    "senior": 3,
    "lead": 4,
    "executive": 5,
}

REMOTE_LOCATION_KEYWORDS = ("remote", "anywhere")
SALARY_KEYWORDS = ("competitive", "market")

HIGH_MATCH_SCORE = 80
MEDIUM_MATCH_SCORE = 50


class ProfileNotFoundError(Exception):
    """Raised when matching is requested for an unknown profile"""
    pass


class MatchingError(Exception):
    """Raised when profile or job data could not be loaded for matching"""
    pass


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def calculate_skills_overlap(
    user_skills: Sequence[str],
    job_skills: Sequence[str],
) -> Tuple[List[str], float, float]:
    """
    Case-insensitive exact overlap between user and job skills.

    Duplicate job skills count once. Matched skills are returned in the job's
    spelling, in job order.

    Returns:
        Tuple of (matching_skills, overlap_percentage, score)
    """
    user_set = {_normalize(skill) for skill in user_skills or [] if _normalize(skill)}

    unique_job_skills = {}
    for skill in job_skills or []:
        key = _normalize(skill)
        if key and key not in unique_job_skills:
            unique_job_skills[key] = skill.strip()

    if not user_set or not unique_job_skills:
        return [], 0.0, 0.0

    matching = [spelling for key, spelling in unique_job_skills.items() if key in user_set]
    overlap_percentage = len(matching) / len(unique_job_skills) * 100
    score = min(MAX_SKILLS_POINTS, overlap_percentage * SKILLS_POINTS_PER_PERCENT)
    return matching, overlap_percentage, score


def calculate_location_match(user_location: Optional[str], job_location: Optional[str]) -> Tuple[int, Optional[str]]:
    """
    Location score. Only the first rule that applies counts.

    Returns:
        Tuple of (score, reason_if_matched)
    """
    user_loc = _normalize(user_location)
    job_loc = _normalize(job_location)
    if not user_loc or not job_loc:
        return 0, None

    if user_loc == job_loc:
        return 25, f"Exact location match: {job_location.strip()}"

    if user_loc in job_loc or job_loc in user_loc:
        return 20, f"Location overlap: {job_location.strip()}"

    if any(keyword in job_loc for keyword in REMOTE_LOCATION_KEYWORDS):
        return 15, "Remote-friendly position"

    return 0, None


def calculate_experience_match(user_level: Optional[str], job_level: Optional[str]) -> Tuple[int, Optional[str]]:
    """
    Experience level score (entry < mid < senior < lead < executive).

    Levels outside the hierarchy score nothing.

    Returns:
        Tuple of (score, reason_if_matched)
    """
    user_rank = EXPERIENCE_HIERARCHY.get(_normalize(user_level))
    job_rank = EXPERIENCE_HIERARCHY.get(_normalize(job_level))
    if not user_rank or not job_rank:
        return 0, None

    if user_rank == job_rank:
        return 15, f"Experience level match: {job_level}"
    if user_rank > job_rank:
        return 10, f"Overqualified for {job_level} position"
    if user_rank == job_rank - 1:
        return 5, f"Slightly underqualified for {job_level} position"
    return 0, None


def calculate_bonus_factors(job: Any, profile: UserProfile, today: date) -> Tuple[int, List[str]]:
    """
    Remote preference, recency, salary signal and preferred job type bonuses.

    Returns:
        Tuple of (score, reasons)
    """
    score = 0
    reasons = []

    if job.remote_friendly and _normalize(profile.remote_preference) == "remote":
        score += 10
        reasons.append("Remote preference match")

    if job.posted_date:
        days_since_posted = (today - job.posted_date).days
        if days_since_posted < 7:
            score += 5
            reasons.append("Recently posted (within 7 days)")
        elif days_since_posted < 30:
            score += 3
            reasons.append("Posted within 30 days")

    # Text heuristic only; numeric salary bounds are not compared
    if profile.has_salary_preference and job.salary_range:
        salary_text = job.salary_range.lower()
        if any(keyword in salary_text for keyword in SALARY_KEYWORDS):
            score += 5
            reasons.append("Competitive salary range")

    if profile.preferred_job_types and job.job_type:
        preferred = {_normalize(job_type) for job_type in profile.preferred_job_types}
        if _normalize(job.job_type) in preferred:
            score += 8
            reasons.append(f"Preferred job type: {job.job_type}")

    return score, reasons


def score_job(job: Any, profile: UserProfile, today: Optional[date] = None) -> JobMatch:
    """Score one job against a profile and attach the reasons."""
    today = today or date.today()
    job = JobResponse.model_validate(job)

    total = 0.0
    reasons: List[str] = []

    matching_skills, overlap_percentage, skills_score = calculate_skills_overlap(
        profile.skills, job.skills_required
    )
    total += skills_score
    if matching_skills:
        reasons.append(f"Matched {len(matching_skills)} skills: {', '.join(matching_skills)}")

    location_score, location_reason = calculate_location_match(profile.location, job.location)
    total += location_score
    if location_reason:
        reasons.append(location_reason)

    experience_score, experience_reason = calculate_experience_match(
        profile.experience_level, job.experience_level
    )
    total += experience_score
    if experience_reason:
        reasons.append(experience_reason)

    bonus_score, bonus_reasons = calculate_bonus_factors(job, profile, today)
    total += bonus_score
    reasons.extend(bonus_reasons)

    # Round half up, then cap
    final_score = min(100, int(math.floor(total + 0.5)))

    return JobMatch(
        **job.model_dump(),
        match_score=final_score,
        match_reasons=reasons,
        matching_skills=matching_skills,
        skills_overlap_percentage=round(overlap_percentage, 2),
    )


def filter_candidates(
    jobs: Iterable[JobResponse], filters: Optional[MatchFilters] = None
) -> List[JobResponse]:
    """Narrow the candidate pool before scoring. Order is preserved."""
    if not filters:
        return list(jobs)

    search = _normalize(filters.search)
    location = _normalize(filters.location)

    candidates = []
    for job in jobs:
        if search:
            haystacks = (job.title, job.company, job.description, job.requirements)
            if not any(search in _normalize(text) for text in haystacks):
                continue
        if location and location not in _normalize(job.location):
            continue
        if filters.job_type and job.job_type != filters.job_type:
            continue
        if filters.experience_level and job.experience_level != filters.experience_level:
            continue
        if filters.remote_only and not job.remote_friendly:
            continue
        candidates.append(job)
    return candidates


def _has_required_skills(match: JobMatch, required_skills: List[str], min_skills_match: int) -> bool:
    required = {_normalize(skill) for skill in required_skills if _normalize(skill)}
    job_skills = {_normalize(skill) for skill in match.skills_required}
    return len(required & job_skills) >= min_skills_match


def calculate_match_stats(matches: Sequence[JobMatch]) -> MatchStats:
    if not matches:
        return MatchStats()
    scores = [match.match_score for match in matches]
    return MatchStats(
        average_score=int(math.floor(sum(scores) / len(scores) + 0.5)),
        high_matches=sum(1 for score in scores if score >= HIGH_MATCH_SCORE),
        medium_matches=sum(1 for score in scores if MEDIUM_MATCH_SCORE <= score < HIGH_MATCH_SCORE),
        low_matches=sum(1 for score in scores if score < MEDIUM_MATCH_SCORE),
    )


def find_matches(
    profile: UserProfile,
    jobs: Iterable[Any],
    filters: Optional[MatchFilters] = None,
    today: Optional[date] = None,
) -> MatchResult:
    """
    Score, rank and filter jobs for a profile.

    Deterministic for the same inputs and `today`. Ties keep pool order.
    Stats are computed over the filtered list before the limit is applied.
    """
    today = today or date.today()
    # Pools may be ORM rows, dicts or JobResponse models
    pool = [JobResponse.model_validate(job) for job in jobs]
    candidates = filter_candidates(pool, filters)

    scored = [score_job(job, profile, today) for job in candidates]
    matches = sorted(scored, key=lambda match: -match.match_score)

    if filters and filters.min_score is not None:
        matches = [match for match in matches if match.match_score >= filters.min_score]

    if filters and filters.required_skills:
        matches = [
            match for match in matches
            if _has_required_skills(match, filters.required_skills, filters.min_skills_match)
        ]

    match_stats = calculate_match_stats(matches)

    if filters and filters.limit:
        matches = matches[:filters.limit]

    return MatchResult(
        matches=matches,
        total_jobs=len(candidates),
        user_profile=profile,
        match_stats=match_stats,
    )


def get_match_recommendations(
    profile: UserProfile,
    jobs: Iterable[Any],
    limit: int = 10,
    today: Optional[date] = None,
) -> List[JobMatch]:
    """Top `limit` matches with no other filters."""
    return find_matches(profile, jobs, MatchFilters(limit=limit), today).matches


def get_match_statistics(
    profile: UserProfile,
    jobs: Iterable[Any],
    today: Optional[date] = None,
) -> MatchStatistics:
    """Match buckets plus the five skills matched most often in high matches."""
    result = find_matches(profile, jobs, today=today)

    skill_counts = Counter(
        skill
        for match in result.matches
        if match.match_score >= HIGH_MATCH_SCORE
        for skill in match.matching_skills
    )

    return MatchStatistics(
        total_jobs=result.total_jobs,
        average_score=result.match_stats.average_score,
        high_matches=result.match_stats.high_matches,
        medium_matches=result.match_stats.medium_matches,
        low_matches=result.match_stats.low_matches,
        top_skills=[skill for skill, _ in skill_counts.most_common(5)],
    )


class JobMatcher:
    """
    Loads a profile and the active job pool, then runs the scorer.

    Errors are not swallowed: an unknown profile raises ProfileNotFoundError,
    any other load failure raises MatchingError.
    """

    def __init__(self, jobs: JobStore, profiles: ProfileStore):
        self.jobs = jobs
        self.profiles = profiles

    async def load_profile(self, user_id: UUID) -> UserProfile:
        try:
            profile = await self.profiles.get_profile(user_id)
        except Exception as e:
            logger.error(f"Error fetching user profile for matching: {e}")
            raise MatchingError(f"Failed to fetch user profile: {e}") from e
        if not profile:
            raise ProfileNotFoundError(f"Profile {user_id} not found")
        return UserProfile.model_validate(profile)

    async def load_candidates(self) -> List[JobResponse]:
        try:
            rows = await self.jobs.list_active_jobs()
        except Exception as e:
            logger.error(f"Error fetching jobs for matching: {e}")
            raise MatchingError(f"Failed to fetch jobs: {e}") from e
        return [JobResponse.model_validate(row) for row in rows]

    async def find_matches(
        self,
        user_id: UUID,
        filters: Optional[MatchFilters] = None,
        today: Optional[date] = None,
    ) -> MatchResult:
        profile = await self.load_profile(user_id)
        jobs = await self.load_candidates()
        result = find_matches(profile, jobs, filters, today)
        logger.info(
            f"Matched {len(result.matches)} of {result.total_jobs} jobs for profile {user_id} "
            f"(avg score {result.match_stats.average_score})"
        )
        return result

    async def get_recommendations(self, user_id: UUID, limit: int = 10) -> List[JobMatch]:
        profile = await self.load_profile(user_id)
        jobs = await self.load_candidates()
        return get_match_recommendations(profile, jobs, limit)

    async def get_statistics(self, user_id: UUID) -> MatchStatistics:
        profile = await self.load_profile(user_id)
        jobs = await self.load_candidates()
        return get_match_statistics(profile, jobs)
