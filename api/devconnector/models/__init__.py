"""Database models for the DevConnector API."""

from devconnector.models.post import Post
from devconnector.models.profile import Profile
from devconnector.models.user import APIKey, User

__all__ = [
    "User",
    "APIKey",
    "Profile",
    "Post",
]
