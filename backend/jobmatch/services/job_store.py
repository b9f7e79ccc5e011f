"""
Job and profile persistence.
All database access for the sync engine and the matcher goes through here.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from jobmatch.models.job import DATA_SOURCE, Job, JobStatus, SyncStatus
from jobmatch.models.notification import Notification
from jobmatch.models.profile import Profile
from jobmatch.schemas.job import JobFilters, NormalizedJob
from jobmatch.schemas.sync import SyncStats

logger = logging.getLogger(__name__)


def _contains_pattern(text: str) -> str:
    """LIKE pattern matching text anywhere, with wildcards in text escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class JobStore:
    """
    Read/write access to the jobs table.

    Every write commits on its own so a failing record never takes earlier
    records down with it; on failure the session is rolled back and the error
    re-raised.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def get_by_external_id(self, external_id: str) -> Optional[Job]:
        result = await self.db.execute(
            select(Job)
            .where(Job.external_id == external_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, job_id: int) -> Optional[Job]:
        result = await self.db.execute(select(Job).where(Job.id == job_id).execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def insert(self, job: NormalizedJob, synced_at: datetime) -> Job:
        """Insert a new job; the row is marked synced as part of the same commit."""
        row = Job(
            **job.to_row(),
            sync_status=SyncStatus.SYNCED.value,
            last_sync_date=synced_at,
        )
        self.db.add(row)
        await self._commit()
        return row

    async def update_by_external_id(self, external_id: str, job: NormalizedJob, synced_at: datetime) -> int:
        """Overwrite all transformed fields of the job with this external id."""
        values = job.to_row()
        values.pop("external_id", None)
        try:
            result = await self.db.execute(
                update(Job)
                .where(Job.external_id == external_id)
                .values(
                    **values,
                    sync_status=SyncStatus.SYNCED.value,
                    last_sync_date=synced_at,
                    updated_at=datetime.utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
        except Exception:
            await self.db.rollback()
            raise
        await self._commit()
        return result.rowcount

    async def mark_inactive(self, active_external_ids: Iterable[str], data_source: str = DATA_SOURCE) -> int:
        """
        Expire Active jobs from this data source whose external id is not in
        the given active set. Returns the number of rows changed.
        """
        active_ids = list(active_external_ids)
        now = datetime.utcnow()
        try:
            result = await self.db.execute(
                update(Job)
                .where(
                    and_(
                        Job.external_id.not_in(active_ids),
                        Job.data_source == data_source,
                        Job.status == JobStatus.ACTIVE.value,
                    )
                )
                .values(
                    status=JobStatus.EXPIRED.value,
                    sync_status=SyncStatus.INACTIVE.value,
                    last_sync_date=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
        except Exception:
            await self.db.rollback()
            raise
        await self._commit()
        return result.rowcount

    async def deactivate(self, external_ids: Iterable[str]) -> int:
        """Expire specific jobs (records deleted at the source). Never deletes rows."""
        ids = list(external_ids)
        if not ids:
            return 0
        now = datetime.utcnow()
        try:
            result = await self.db.execute(
                update(Job)
                .where(Job.external_id.in_(ids))
                .values(
                    status=JobStatus.EXPIRED.value,
                    sync_status=SyncStatus.INACTIVE.value,
                    last_sync_date=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
        except Exception:
            await self.db.rollback()
            raise
        await self._commit()
        return result.rowcount

    async def list_jobs(self, filters: Optional[JobFilters] = None) -> List[Job]:
        """
        Filtered job listing, newest posted first.

        search matches title, company, description or requirements
        (case-insensitive substring).
        """
        filters = filters or JobFilters()
        query = select(Job).execution_options(populate_existing=True)

        conditions = []
        if filters.search and filters.search.strip():
            pattern = _contains_pattern(filters.search.strip())
            conditions.append(or_(
                Job.title.ilike(pattern, escape="\\"),
                Job.company.ilike(pattern, escape="\\"),
                Job.description.ilike(pattern, escape="\\"),
                Job.requirements.ilike(pattern, escape="\\"),
            ))
        if filters.location:
            conditions.append(Job.location.ilike(_contains_pattern(filters.location), escape="\\"))
        if filters.job_type:
            conditions.append(Job.job_type == filters.job_type)
        if filters.experience_level:
            conditions.append(Job.experience_level == filters.experience_level)
        if filters.status:
            conditions.append(Job.status == filters.status)
        if filters.remote_only:
            conditions.append(Job.remote_friendly.is_(True))

        if conditions:
            query = query.where(and_(*conditions))

        query = query.order_by(Job.posted_date.desc().nulls_last(), Job.id)
        if filters.skip:
            query = query.offset(filters.skip)
        if filters.limit:
            query = query.limit(filters.limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_active_jobs(self) -> List[Job]:
        """Candidate pool for matching: Active and synced, newest posted first."""
        result = await self.db.execute(
            select(Job)
            .where(
                Job.status == JobStatus.ACTIVE.value,
                Job.sync_status == SyncStatus.SYNCED.value,
            )
            .order_by(Job.posted_date.desc().nulls_last(), Job.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_sync_stats(self) -> SyncStats:
        result = await self.db.execute(
            select(Job.sync_status, Job.status, func.count()).group_by(Job.sync_status, Job.status)
        )
        stats = SyncStats()
        for sync_status, status, count in result.all():
            stats.total += count
            if sync_status == SyncStatus.SYNCED.value:
                stats.synced += count
            elif sync_status == SyncStatus.PENDING.value:
                stats.pending += count
            elif sync_status == SyncStatus.ERROR.value:
                stats.error += count
            if status == JobStatus.ACTIVE.value:
                stats.active += count
            else:
                stats.inactive += count
        return stats

    async def get_last_sync_date(self) -> Optional[datetime]:
        result = await self.db.execute(select(func.max(Job.last_sync_date)))
        return result.scalar_one_or_none()


class ProfileStore:
    """Read access to profiles plus the notification log."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self, profile_id: UUID) -> Optional[Profile]:
        result = await self.db.execute(select(Profile).where(Profile.id == profile_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Profile]:
        result = await self.db.execute(
            select(Profile).where(func.lower(Profile.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def disable_notifications(self, email: str) -> Optional[Profile]:
        """Turn email notifications off for the profile with this email."""
        profile = await self.get_by_email(email)
        if not profile:
            return None
        profile.email_notifications_enabled = False
        profile.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(profile)
        return profile

    async def log_notification(
        self,
        profile_id: UUID,
        type: str,
        title: str,
        content: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            profile_id=profile_id,
            type=type,
            title=title,
            content=content,
            details=details,
        )
        self.db.add(notification)
        await self.db.commit()
        await self.db.refresh(notification)
        return notification
