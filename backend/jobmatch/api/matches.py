"""
Match endpoints for the authenticated profile.

GET  /api/matches?type=matches|recommendations|statistics
POST /api/matches   (filters in the JSON body)
"""
import logging
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobmatch.api.deps import get_current_profile, get_matcher
from jobmatch.models.profile import Profile
from jobmatch.schemas.match import MatchFilters
from jobmatch.services.job_matching import JobMatcher, MatchingError, ProfileNotFoundError

logger = logging.getLogger(__name__)
router = APIRouter()


async def _run(coro):
    try:
        return await coro
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MatchingError as e:
        logger.error(f"Error in matches API: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to compute job matches")


@router.get("")
async def get_matches(
    type: Literal["matches", "recommendations", "statistics"] = Query("matches"),
    limit: int = Query(10, ge=1, le=100),
    min_score: Optional[int] = Query(None, ge=0, le=100),
    location: Optional[str] = Query(None),
    job_type: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None),
    remote_only: bool = Query(False),
    search: Optional[str] = Query(None),
    required_skills: Optional[List[str]] = Query(None),
    min_skills_match: int = Query(1, ge=1),
    profile: Profile = Depends(get_current_profile),
    matcher: JobMatcher = Depends(get_matcher),
):
    """
    Matches, recommendations or statistics for the calling profile.

    Returns:
        200: {success, data, timestamp}
        401: No or invalid auth cookie
        404: Profile disappeared
        500: Matching failed
    """
    if type == "recommendations":
        data = await _run(matcher.get_recommendations(profile.id, limit))
    elif type == "statistics":
        data = await _run(matcher.get_statistics(profile.id))
    else:
        filters = MatchFilters(
            limit=limit,
            min_score=min_score or None,
            location=location,
            job_type=job_type,
            experience_level=experience_level,
            remote_only=remote_only,
            search=search,
            required_skills=required_skills,
            min_skills_match=min_skills_match,
        )
        data = await _run(matcher.find_matches(profile.id, filters))

    return {"success": True, "data": data, "timestamp": datetime.utcnow()}


@router.post("")
async def post_matches(
    filters: MatchFilters,
    profile: Profile = Depends(get_current_profile),
    matcher: JobMatcher = Depends(get_matcher),
):
    """Ranked matches for the calling profile using filters from the body (limit defaults to 10)."""
    if filters.limit is None:
        filters.limit = 10
    data = await _run(matcher.find_matches(profile.id, filters))
    return {"success": True, "data": data, "timestamp": datetime.utcnow()}
