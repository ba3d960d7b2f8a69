"""Authentication utilities for the DevConnector API."""

from devconnector.auth.api_key import generate_api_key, get_key_prefix, hash_api_key
from devconnector.auth.dependencies import get_current_user

__all__ = [
    "generate_api_key",
    "hash_api_key",
    "get_key_prefix",
    "get_current_user",
]
