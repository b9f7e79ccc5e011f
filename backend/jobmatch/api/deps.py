"""
Shared FastAPI dependencies.

Every collaborator an endpoint needs (stores, matcher, email service, the
Airtable source) comes through a dependency here so tests can swap it with
app.dependency_overrides.
"""
import asyncio
import logging
from typing import AsyncGenerator, Optional
from uuid import UUID

from fastapi import Cookie, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from jobmatch.config import settings
from jobmatch.database import get_db
from jobmatch.models.profile import Profile
from jobmatch.services.airtable import open_airtable_client
from jobmatch.services.email import EmailService
from jobmatch.services.job_matching import JobMatcher
from jobmatch.services.job_store import JobStore, ProfileStore
from jobmatch.services.notifications import NotificationDispatcher
from jobmatch.services.sync_engine import JobSource

logger = logging.getLogger(__name__)

# One sync at a time per process, whichever endpoint triggered it
sync_lock = asyncio.Lock()


def get_job_store(db: AsyncSession = Depends(get_db)) -> JobStore:
    return JobStore(db)


def get_profile_store(db: AsyncSession = Depends(get_db)) -> ProfileStore:
    return ProfileStore(db)


def get_matcher(
    jobs: JobStore = Depends(get_job_store),
    profiles: ProfileStore = Depends(get_profile_store),
) -> JobMatcher:
    return JobMatcher(jobs, profiles)


def get_email_service() -> EmailService:
    return EmailService()


def get_dispatcher(
    matcher: JobMatcher = Depends(get_matcher),
    profiles: ProfileStore = Depends(get_profile_store),
    email_service: EmailService = Depends(get_email_service),
) -> NotificationDispatcher:
    return NotificationDispatcher(matcher, profiles, email_service)


async def get_job_source() -> AsyncGenerator[Optional[JobSource], None]:
    """
    Yield an Airtable client for the duration of the request.

    Yields None when Airtable credentials are missing; sync endpoints report
    that as a failed sync instead of a server error.
    """
    if not settings.airtable_token or not settings.airtable_base_id:
        logger.error("Airtable token or base id is not configured")
        yield None
        return

    async with open_airtable_client(settings) as client:
        yield client


async def get_current_profile(
    auth_token: str = Cookie(None),
    profiles: ProfileStore = Depends(get_profile_store),
) -> Profile:
    """
    Resolve the calling profile from the auth_token cookie.

    The cookie holds the profile id.

    Raises:
        HTTPException 401: Cookie missing, malformed, or no such profile
    """
    if not auth_token:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        profile_id = UUID(auth_token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    profile = await profiles.get_profile(profile_id)
    if not profile:
        raise HTTPException(status_code=401, detail="Invalid token. User not found.")
    return profile


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """
    Require `Authorization: Bearer <cron_secret>` when a secret is configured.

    Raises:
        HTTPException 401: Secret configured and header does not match
    """
    if not settings.cron_secret:
        logger.warning("CRON_SECRET is not set, sync endpoints are unprotected")
        return

    if authorization != f"Bearer {settings.cron_secret}":
        logger.warning("Rejected sync request with missing or invalid secret")
        raise HTTPException(status_code=401, detail="Unauthorized")
