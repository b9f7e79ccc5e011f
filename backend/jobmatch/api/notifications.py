"""
Notification endpoints: send match emails, weekly digests and handle unsubscribes.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import EmailStr

from jobmatch.api.deps import get_dispatcher, get_profile_store
from jobmatch.schemas.notification import NotificationResult, SendNotificationRequest, UnsubscribeRequest
from jobmatch.services.job_matching import MatchingError, ProfileNotFoundError
from jobmatch.services.job_store import ProfileStore
from jobmatch.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/notifications/send", response_model=NotificationResult)
async def send_notification(
    request: SendNotificationRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Email a profile its top matches.

    Returns:
        200: Sent, or skipped with a message (no matches, notifications off)
        404: Unknown user
        500: Matching failed
    """
    try:
        return await dispatcher.send_match_notification(request.user_id, request.limit)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except MatchingError as e:
        logger.error(f"Notification send error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to send notification")


@router.post("/notifications/digest/{user_id}", response_model=NotificationResult)
async def send_digest(
    user_id: UUID,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Email a profile its weekly match statistics."""
    try:
        return await dispatcher.send_weekly_digest(user_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except MatchingError as e:
        logger.error(f"Weekly digest error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to send digest")


@router.post("/unsubscribe")
async def unsubscribe(
    request: UnsubscribeRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Turn off email notifications for an address."""
    if not await dispatcher.unsubscribe(request.email):
        raise HTTPException(status_code=404, detail="User not found")

    return {"success": True, "message": "Successfully unsubscribed from email notifications"}


@router.get("/unsubscribe")
async def unsubscribe_status(
    email: EmailStr,
    profiles: ProfileStore = Depends(get_profile_store),
):
    """Current notification preference for an address."""
    profile = await profiles.get_by_email(email)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")

    return {
        "email": profile.email,
        "notifications_enabled": bool(profile.email_notifications_enabled),
    }
