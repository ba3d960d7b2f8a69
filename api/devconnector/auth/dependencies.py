"""Authentication dependencies for FastAPI endpoints."""

import hmac
from datetime import datetime, timezone

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devconnector.auth.api_key import API_KEY_PREFIX, hash_api_key
from devconnector.database import get_db
from devconnector.errors import Unauthorized
from devconnector.models.user import APIKey, User


async def get_current_user(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate the API key header and return the user it belongs to.

    Raises:
        Unauthorized: if the key is missing, malformed, unknown, revoked or expired
    """
    if not x_api_key:
        raise Unauthorized("No API key, authorization denied")

    if not x_api_key.startswith(API_KEY_PREFIX):
        raise Unauthorized("Invalid API key format")

    key_hash = hash_api_key(x_api_key)

    result = await db.execute(
        select(APIKey)
        .options(selectinload(APIKey.user))
        .where(APIKey.key_hash == key_hash)
        .where(APIKey.revoked_at.is_(None))
        .execution_options(populate_existing=True)
    )
    api_key = result.scalar_one_or_none()

    if not api_key:
        # Compare anyway so unknown keys take as long as known ones
        hmac.compare_digest(key_hash, "0" * 64)
        raise Unauthorized("Invalid or revoked API key")

    if api_key.expires_at is not None:
        expires_at = api_key.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at < datetime.now(timezone.utc):
            raise Unauthorized("API key has expired")

    return api_key.user
