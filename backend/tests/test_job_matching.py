"""
Tests for the job matching service.

Pure scoring tests run on plain dicts; JobMatcher tests use the in-memory
database.
"""
from datetime import date, timedelta
from uuid import uuid4

import pytest

from jobmatch.schemas.match import MatchFilters
from jobmatch.schemas.profile import UserProfile
from jobmatch.services.job_matching import (
    JobMatcher,
    MatchingError,
    ProfileNotFoundError,
    calculate_experience_match,
    calculate_location_match,
    calculate_skills_overlap,
    find_matches,
    get_match_recommendations,
    get_match_statistics,
    score_job,
)
from jobmatch.services.job_store import JobStore, ProfileStore

TODAY = date(2024, 6, 15)


def _job(job_id=1, **overrides):
    job = {
        "id": job_id,
        "external_id": f"rec{job_id}",
        "title": "Engineer",
        "company": "Acme",
        "location": "Berlin",
        "skills_required": [],
    }
    job.update(overrides)
    return job


def _profile(**overrides) -> UserProfile:
    return UserProfile(**overrides)


# ============================================================
# COMPONENTS
# ============================================================

def test_skills_overlap_case_insensitive_and_deduped():
    matching, pct, score = calculate_skills_overlap(
        ["react", "NODE.JS"], ["React", "TypeScript", "react", "Node.js"]
    )
    assert matching == ["React", "Node.js"]
    assert pct == pytest.approx(200 / 3)
    assert score == pytest.approx(100 / 3)


def test_skills_overlap_empty_sides():
    assert calculate_skills_overlap([], ["React"]) == ([], 0.0, 0.0)
    assert calculate_skills_overlap(["React"], []) == ([], 0.0, 0.0)


def test_full_skills_overlap_caps_at_50():
    _, pct, score = calculate_skills_overlap(["A", "B"], ["a", "b"])
    assert pct == 100
    assert score == 50


@pytest.mark.parametrize("user, job, expected", [
    ("Berlin", "berlin", 25),
    ("Berlin", "Berlin, Germany", 20),
    ("Munich", "Remote (EU)", 15),
    ("Munich", "Anywhere", 15),
    ("Munich", "Berlin", 0),
    (None, "Remote", 0),
    ("Berlin", None, 0),
])
def test_location_match(user, job, expected):
    assert calculate_location_match(user, job)[0] == expected


@pytest.mark.parametrize("user, job, expected", [
    ("mid", "Mid", 15),
    ("senior", "Mid", 10),
    ("mid", "Senior", 5),
    ("entry", "Senior", 0),
    ("guru", "Mid", 0),
    ("mid", None, 0),
])
def test_experience_match(user, job, expected):
    assert calculate_experience_match(user, job)[0] == expected


# ============================================================
# SCORE
# ============================================================

def test_reference_scenario():
    profile = _profile(skills=["React", "Node.js"], location="Remote", experience_level="mid")
    job = _job(
        skills_required=["React", "TypeScript"],
        location="Remote",
        experience_level="Mid",
        posted_date=TODAY - timedelta(days=2),
    )

    match = score_job(job, profile, TODAY)

    # 25 skills + 25 exact location + 15 experience + 5 recency
    assert match.match_score == 70
    assert match.matching_skills == ["React"]
    assert match.skills_overlap_percentage == 50.0
    assert match.match_reasons == [
        "Matched 1 skills: React",
        "Exact location match: Remote",
        "Experience level match: Mid",
        "Recently posted (within 7 days)",
    ]


def test_all_bonuses_and_cap():
    profile = _profile(
        skills=["Python"],
        location="Berlin",
        experience_level="senior",
        remote_preference="remote",
        preferred_salary_min=80000,
        preferred_job_types=["full-time"],
    )
    job = _job(
        skills_required=["Python"],
        location="Berlin",
        experience_level="Senior",
        remote_friendly=True,
        posted_date=TODAY - timedelta(days=10),
        salary_range="Market rate",
        job_type="Full-time",
    )

    match = score_job(job, profile, TODAY)

    # 50 + 25 + 15 + 10 + 3 + 5 + 8 = 116, capped
    assert match.match_score == 100
    assert match.match_reasons[-4:] == [
        "Remote preference match",
        "Posted within 30 days",
        "Competitive salary range",
        "Preferred job type: Full-time",
    ]


def test_salary_signal_needs_profile_preference():
    job = _job(salary_range="Competitive")
    assert score_job(job, _profile(), TODAY).match_score == 0
    assert score_job(job, _profile(preferred_salary_max=0), TODAY).match_score == 5


def test_empty_profile_scores_zero():
    match = score_job(_job(skills_required=["React"], location="Remote"), _profile(), TODAY)
    assert match.match_score == 0
    assert match.match_reasons == []


def test_score_rounds_half_up():
    # 1 of 4 skills = 25% overlap = 12.5 points
    profile = _profile(skills=["A"])
    match = score_job(_job(skills_required=["A", "B", "C", "D"]), profile, TODAY)
    assert match.match_score == 13


def test_adding_a_skill_never_lowers_score():
    job = _job(skills_required=["React", "TypeScript", "GraphQL"], location="Remote")
    before = score_job(job, _profile(skills=["React"], location="Remote"), TODAY).match_score
    after = score_job(job, _profile(skills=["React", "GraphQL"], location="Remote"), TODAY).match_score
    assert after >= before


# ============================================================
# FIND MATCHES
# ============================================================

def _pool():
    return [
        _job(1, skills_required=["SQL"], location="Berlin"),
        _job(2, skills_required=["React", "Node.js"], location="Remote", remote_friendly=True),
        _job(3, skills_required=["React"], location="Paris", job_type="Contract"),
        _job(4, skills_required=["Go"], location="Remote", remote_friendly=True, title="Go Developer"),
    ]


def _seeker():
    return _profile(skills=["React", "Node.js"], location="Remote")


def test_find_matches_sorted_and_stable():
    result = find_matches(_seeker(), _pool(), today=TODAY)

    scores = [match.match_score for match in result.matches]
    assert scores == sorted(scores, reverse=True)
    assert [match.id for match in result.matches] == [2, 3, 4, 1]
    assert result.total_jobs == 4
    assert all(0 <= score <= 100 for score in scores)


def test_find_matches_is_deterministic():
    first = find_matches(_seeker(), _pool(), today=TODAY)
    second = find_matches(_seeker(), _pool(), today=TODAY)
    assert first.model_dump() == second.model_dump()


def test_min_score_and_limit():
    result = find_matches(_seeker(), _pool(), MatchFilters(min_score=20, limit=1), TODAY)

    assert [match.id for match in result.matches] == [2]
    # stats cover every match above min_score, not just the limited page
    assert result.match_stats.high_matches + result.match_stats.medium_matches + result.match_stats.low_matches == 3


def test_pre_score_filters():
    result = find_matches(_seeker(), _pool(), MatchFilters(remote_only=True), TODAY)
    assert {match.id for match in result.matches} == {2, 4}
    assert result.total_jobs == 2

    result = find_matches(_seeker(), _pool(), MatchFilters(search="go dev"), TODAY)
    assert [match.id for match in result.matches] == [4]

    result = find_matches(_seeker(), _pool(), MatchFilters(job_type="Contract"), TODAY)
    assert [match.id for match in result.matches] == [3]


def test_required_skills_filter():
    filters = MatchFilters(required_skills=["react", "node.js"], min_skills_match=2)
    result = find_matches(_seeker(), _pool(), filters, TODAY)
    assert [match.id for match in result.matches] == [2]


def test_no_jobs():
    result = find_matches(_seeker(), [], today=TODAY)
    assert result.matches == []
    assert result.total_jobs == 0
    assert result.match_stats.average_score == 0


def test_recommendations_and_statistics():
    top = get_match_recommendations(_seeker(), _pool(), limit=2, today=TODAY)
    assert [match.id for match in top] == [2, 3]

    remote_seeker = _profile(skills=["React", "Node.js"], location="Remote", remote_preference="remote")
    stats = get_match_statistics(remote_seeker, _pool(), today=TODAY)
    assert stats.total_jobs == 4
    assert stats.high_matches == 1
    assert stats.top_skills == ["React", "Node.js"]


# ============================================================
# JOB MATCHER (database backed)
# ============================================================

@pytest.mark.asyncio
async def test_matcher_uses_only_active_synced_jobs(db, test_profile, stored_jobs):
    matcher = JobMatcher(JobStore(db), ProfileStore(db))

    result = await matcher.find_matches(test_profile.id)

    assert result.total_jobs == 2
    assert {match.external_id for match in result.matches} == {"recA", "recB"}
    assert result.matches[0].external_id == "recA"
    assert result.user_profile.email == "seeker@example.com"


@pytest.mark.asyncio
async def test_matcher_unknown_profile(db):
    matcher = JobMatcher(JobStore(db), ProfileStore(db))
    with pytest.raises(ProfileNotFoundError):
        await matcher.find_matches(uuid4())


@pytest.mark.asyncio
async def test_matcher_store_failure_raises_matching_error(db, test_profile):
    jobs = JobStore(db)

    async def broken():
        raise RuntimeError("connection reset")

    jobs.list_active_jobs = broken
    matcher = JobMatcher(jobs, ProfileStore(db))

    with pytest.raises(MatchingError):
        await matcher.get_recommendations(test_profile.id)


def test_min_score_80_matches_high_bucket():
    remote_seeker = _profile(skills=["React", "Node.js"], location="Remote", remote_preference="remote")

    result = find_matches(remote_seeker, _pool(), MatchFilters(min_score=80), TODAY)

    assert all(match.match_score >= 80 for match in result.matches)
    assert result.match_stats.high_matches == len(result.matches) == 1
