"""Database models"""
from jobmatch.models.job import Job, JobStatus, SyncStatus, DATA_SOURCE
from jobmatch.models.profile import Profile
from jobmatch.models.notification import Notification, NotificationType

__all__ = [
    "Job",
    "JobStatus",
    "SyncStatus",
    "DATA_SOURCE",
    "Profile",
    "Notification",
    "NotificationType",
]
