"""Sync-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class SyncResult(BaseModel):
    """Outcome of one reconciliation pass."""
    added: int = 0
    updated: int = 0
    errors: list[str] = Field(default_factory=list)
    total_processed: int = 0
    sync_date: datetime = Field(default_factory=datetime.utcnow)


class SyncStats(BaseModel):
    """Counts of stored jobs by sync status and lifecycle status."""
    total: int = 0
    synced: int = 0
    pending: int = 0
    error: int = 0
    active: int = 0
    inactive: int = 0


class SyncResponse(BaseModel):
    """Response returned by the sync trigger endpoints."""
    success: bool
    result: Optional[SyncResult] = None
    stats: Optional[SyncStats] = None
    last_sync_date: Optional[datetime] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
