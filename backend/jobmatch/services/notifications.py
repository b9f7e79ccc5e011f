"""
Match notification dispatch.
Picks a profile's top matches, emails them and records the notification.
"""
import logging
from uuid import UUID

from jobmatch.models.notification import NotificationType
from jobmatch.schemas.notification import NotificationResult
from jobmatch.services.email import EmailService
from jobmatch.services.job_matching import JobMatcher, ProfileNotFoundError
from jobmatch.services.job_store import ProfileStore

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Sends match emails for a profile through the injected EmailService."""

    def __init__(self, matcher: JobMatcher, profiles: ProfileStore, email_service: EmailService):
        self.matcher = matcher
        self.profiles = profiles
        self.email_service = email_service

    async def send_match_notification(self, user_id: UUID, limit: int = 10) -> NotificationResult:
        """
        Email the profile its top `limit` matches.

        Raises:
            ProfileNotFoundError: If the profile does not exist
        """
        profile = await self.profiles.get_profile(user_id)
        if not profile:
            raise ProfileNotFoundError(f"Profile {user_id} not found")

        if not profile.email_notifications_enabled:
            logger.info(f"Email notifications disabled for profile {user_id}, skipping")
            return NotificationResult(success=True, message="Email notifications are disabled for this user")

        matches = await self.matcher.get_recommendations(user_id, limit)
        if not matches:
            return NotificationResult(success=True, message="No matches found for user")

        email_sent = await self.email_service.send_match_notification(
            profile.email, profile.display_name, matches
        )

        await self.profiles.log_notification(
            profile_id=profile.id,
            type=NotificationType.JOB_MATCHES.value,
            title=f"Found {len(matches)} new job matches",
            content=f"Sent email notification with {len(matches)} job matches",
            details={"match_count": len(matches), "email_sent": email_sent},
        )
        logger.info(f"Sent {len(matches)} matches to profile {user_id} (email_sent={email_sent})")

        return NotificationResult(success=True, matches_sent=len(matches), email_sent=email_sent)

    async def send_weekly_digest(self, user_id: UUID) -> NotificationResult:
        """Email the profile its match statistics."""
        profile = await self.profiles.get_profile(user_id)
        if not profile:
            raise ProfileNotFoundError(f"Profile {user_id} not found")

        if not profile.email_notifications_enabled:
            return NotificationResult(success=True, message="Email notifications are disabled for this user")

        stats = await self.matcher.get_statistics(user_id)
        email_sent = await self.email_service.send_weekly_digest(profile.email, profile.display_name, stats)

        await self.profiles.log_notification(
            profile_id=profile.id,
            type=NotificationType.WEEKLY_DIGEST.value,
            title="Weekly digest",
            content=f"{stats.high_matches} strong matches out of {stats.total_jobs} jobs",
            details={"email_sent": email_sent, "top_skills": stats.top_skills},
        )
        return NotificationResult(success=True, email_sent=email_sent)

    async def unsubscribe(self, email: str) -> bool:
        """Disable email notifications for the profile with this email. Returns False if unknown."""
        profile = await self.profiles.disable_notifications(email)
        if not profile:
            return False

        await self.profiles.log_notification(
            profile_id=profile.id,
            type=NotificationType.SYSTEM.value,
            title="Email notifications disabled",
            content="User unsubscribed from email notifications",
            details={"action": "unsubscribe", "email": email},
        )
        logger.info(f"Profile {profile.id} unsubscribed from email notifications")
        return True
