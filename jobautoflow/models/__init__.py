from jobautoflow.models.user import User
from jobautoflow.models.profile import UserProfile
from jobautoflow.models.preferences import UserPreferences
from jobautoflow.models.job import Job
from jobautoflow.models.match_cache import JobMatchCache
from jobautoflow.models.application import Application
from jobautoflow.models.notification import Notification

__all__ = [
    "User",
    "UserProfile",
    "UserPreferences",
    "Job",
    "JobMatchCache",
    "Application",
    "Notification",
]
