"""Storage module for the video database and search queries."""

from .database import get_session, init_db
from .models import User, Video, QuotaUsage
from .repository import VideoRepository

__all__ = [
    "get_session",
    "init_db",
    "User",
    "Video",
    "QuotaUsage",
    "VideoRepository",
]
