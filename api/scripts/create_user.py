"""Create a user and print a fresh API key for it."""

from __future__ import annotations

import argparse
import asyncio
import hashlib

from devconnector.auth.api_key import generate_api_key, get_key_prefix
from devconnector.database import AsyncSessionLocal
from devconnector.models.user import APIKey, User


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode()).hexdigest()  # noqa: S324
    return f"https://www.gravatar.com/avatar/{digest}?s=200&r=pg&d=mm"


async def create_user(name: str, email: str, key_name: str) -> str:
    async with AsyncSessionLocal() as session:
        user = User(name=name, email=email.lower(), avatar=gravatar_url(email))
        session.add(user)
        await session.flush()

        plaintext_key, key_hash = generate_api_key()
        session.add(
            APIKey(
                user_id=user.id,
                key_hash=key_hash,
                key_prefix=get_key_prefix(plaintext_key),
                name=key_name,
            )
        )
        await session.commit()
        print(f"Created user {user.id} <{user.email}>")
    return plaintext_key


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a user with an API key")
    parser.add_argument("name", help="Display name")
    parser.add_argument("email", help="Email address (must be unique)")
    parser.add_argument("--key-name", default="default", help="Label for the API key")
    args = parser.parse_args()

    api_key = asyncio.run(create_user(args.name, args.email, args.key_name))
    print(f"API key (shown once): {api_key}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
