"""Notification-related Pydantic schemas."""
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field


class SendNotificationRequest(BaseModel):
    """Request to email a profile its top matches."""
    user_id: UUID
    limit: int = Field(default=10, ge=1, le=50)


class NotificationResult(BaseModel):
    """Outcome of a match notification."""
    success: bool
    matches_sent: int = 0
    email_sent: bool = False
    message: Optional[str] = None


class UnsubscribeRequest(BaseModel):
    email: EmailStr
