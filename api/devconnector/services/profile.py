"""Profile service: upsert, lookups, cascading delete and entry list edits.

Concurrent writes to one profile are not serialized. Updates and list edits
read the document and write it back, so the last write wins and two
simultaneous entry edits for the same owner can lose one of them.
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devconnector.errors import (
    BadRequest,
    InvalidIdentifier,
    NotFound,
    PartialFailure,
    StoreUnavailable,
)
from devconnector.logging import get_logger
from devconnector.models.profile import Profile
from devconnector.schemas.profile import EducationRequest, ExperienceRequest, ProfileRequest
from devconnector.services.account import AccountService
from devconnector.services.validation import (
    EDUCATION_RULES,
    EXPERIENCE_RULES,
    PROFILE_RULES,
    Rule,
    check_required,
    is_blank,
)

logger = get_logger("devconnector.profile")

NO_PROFILE = "There is no profile for this user"
PROFILE_NOT_FOUND = "Profile not found"

SCALAR_FIELDS = ("company", "website", "location", "bio", "status", "github_username")
SOCIAL_FIELDS = ("youtube", "facebook", "twitter", "linkedin")


# --- Field building ---


def parse_skills(skills: str | list[str]) -> list[str]:
    """Split a comma-separated skills string into trimmed, non-empty names."""
    tokens = skills.split(",") if isinstance(skills, str) else skills
    return [token.strip() for token in tokens if token.strip()]


def build_profile_fields(data: ProfileRequest) -> dict[str, Any]:
    """
    Collect only the fields that were actually provided.

    Empty and whitespace-only strings count as absent. A skills string with
    no tokens is absent too, while an explicit empty list is kept so it can
    clear stored skills. Provided social links form a complete new mapping.
    """
    fields: dict[str, Any] = {}
    for name in SCALAR_FIELDS:
        value = getattr(data, name)
        if not is_blank(value):
            fields[name] = value

    if isinstance(data.skills, list):
        fields["skills"] = parse_skills(data.skills)
    elif data.skills:
        skills = parse_skills(data.skills)
        if skills:
            fields["skills"] = skills

    social = {}
    for name in SOCIAL_FIELDS:
        value = getattr(data, name)
        if not is_blank(value):
            social[name] = value
    if social:
        fields["social"] = social

    return fields


# --- Entry list edits ---


def new_entry_id(entries: list[dict[str, Any]]) -> str:
    """Generate an id not used by any sibling entry."""
    taken = {entry.get("id") for entry in entries}
    entry_id = uuid.uuid4().hex
    while entry_id in taken:
        entry_id = uuid.uuid4().hex
    return entry_id


def prepend_entry(entries: list[dict[str, Any]], entry: dict[str, Any]) -> list[dict[str, Any]]:
    """Return a new list with ``entry`` at the head."""
    return [entry, *entries]


def find_entry_index(entries: list[dict[str, Any]], entry_id: str) -> int:
    """Position of the entry with ``entry_id``, or -1."""
    for index, entry in enumerate(entries):
        if entry.get("id") == entry_id:
            return index
    return -1


def remove_entry(
    entries: list[dict[str, Any]],
    entry_id: str,
    legacy: bool = False,
) -> list[dict[str, Any]] | None:
    """
    Return a new list without the entry whose id is ``entry_id``.

    Returns None when no entry matches. In legacy mode an unknown id removes
    the last entry instead (and leaves an empty list unchanged).
    """
    remove_index = find_entry_index(entries, entry_id)
    if remove_index == -1:
        if not legacy:
            return None
        return entries[:-1]
    return entries[:remove_index] + entries[remove_index + 1:]


# --- Service ---


class ProfileService:
    """Operations on the single profile document each user owns."""

    def __init__(
        self,
        db: AsyncSession,
        accounts: AccountService | None = None,
        legacy_entry_removal: bool = False,
        list_delay_seconds: float = 0.0,
    ):
        self.db = db
        self.accounts = accounts or AccountService(db)
        self.legacy_entry_removal = legacy_entry_removal
        self.list_delay_seconds = list_delay_seconds

    @asynccontextmanager
    async def _store_errors(self, operation: str) -> AsyncIterator[None]:
        """Turn persistence failures into StoreUnavailable, logging the cause."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(
                "store_error",
                operation=operation,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            await self.db.rollback()
            raise StoreUnavailable() from exc

    async def _find(self, owner_id: UUID) -> Profile | None:
        result = await self.db.execute(
            select(Profile)
            .options(selectinload(Profile.user))
            .where(Profile.user_id == owner_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _require(self, owner_id: UUID) -> Profile:
        profile = await self._find(owner_id)
        if profile is None:
            raise NotFound(NO_PROFILE)
        return profile

    # --- Reads ---

    async def get_own(self, owner_id: UUID) -> Profile:
        """Get the caller's profile."""
        async with self._store_errors("get_own"):
            return await self._require(owner_id)

    async def list_all(self) -> list[Profile]:
        """Every profile, no pagination."""
        if self.list_delay_seconds > 0:
            await asyncio.sleep(self.list_delay_seconds)
        async with self._store_errors("list_all"):
            result = await self.db.execute(
                select(Profile)
                .options(selectinload(Profile.user))
                .order_by(Profile.date)
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())

    async def get_by_owner(self, owner_id: str) -> Profile:
        """Public lookup by owner id. The id is checked before touching the store."""
        try:
            owner_uuid = UUID(owner_id)
        except (TypeError, ValueError) as exc:
            raise InvalidIdentifier("Invalid ID") from exc

        async with self._store_errors("get_by_owner"):
            profile = await self._find(owner_uuid)
        if profile is None:
            raise NotFound(PROFILE_NOT_FOUND)
        return profile

    # --- Upsert ---

    def _apply_update(self, profile: Profile, fields: dict[str, Any]) -> None:
        # social is replaced as a whole when present, like any other field
        for name, value in fields.items():
            setattr(profile, name, value)

    async def upsert(self, owner_id: UUID, data: ProfileRequest) -> Profile:
        """
        Create the caller's profile, or merge the provided fields into it.

        Fields that were not provided are never touched. Social links, when
        any are given, replace the stored set. ``status`` is required when
        the profile does not exist yet.
        """
        fields = build_profile_fields(data)

        async with self._store_errors("upsert"):
            profile = await self._find(owner_id)
            if profile is not None:
                self._apply_update(profile, fields)
                await self.db.commit()
                logger.info("profile_updated", user_id=str(owner_id), fields=sorted(fields))
                return await self._require(owner_id)

            violations = check_required(fields, PROFILE_RULES)
            if violations:
                raise BadRequest(violations)

            self.db.add(Profile(user_id=owner_id, **fields))
            try:
                await self.db.commit()
            except IntegrityError:
                # Another request created the profile first; update it instead
                await self.db.rollback()
                profile = await self._require(owner_id)
                self._apply_update(profile, fields)
                await self.db.commit()
                logger.info("profile_updated", user_id=str(owner_id), fields=sorted(fields))
            else:
                logger.info("profile_created", user_id=str(owner_id))
            return await self._require(owner_id)

    # --- Delete ---

    async def _delete_profile(self, owner_id: UUID) -> None:
        await self.db.execute(delete(Profile).where(Profile.user_id == owner_id))

    async def delete_own(self, owner_id: UUID) -> None:
        """
        Delete the caller's posts, profile and account, in that order.

        Each step commits on its own. A failing first step leaves everything
        in place (StoreUnavailable); a later failure leaves the earlier steps
        committed and raises PartialFailure. Nothing is rolled back.
        """
        steps = [
            ("posts", self.accounts.delete_posts),
            ("profile", self._delete_profile),
            ("account", self.accounts.delete_account),
        ]
        completed: list[str] = []
        for name, step in steps:
            try:
                await step(owner_id)
                await self.db.commit()
            except SQLAlchemyError as exc:
                await self.db.rollback()
                logger.error(
                    "account_deletion_step_failed",
                    user_id=str(owner_id),
                    step=name,
                    completed=completed,
                    error=str(exc),
                )
                if not completed:
                    raise StoreUnavailable() from exc
                raise PartialFailure(completed, name, "Account deletion incomplete") from exc
            completed.append(name)

        logger.info("account_deleted", user_id=str(owner_id))

    # --- Entry lists ---

    async def _add_entry(
        self,
        owner_id: UUID,
        collection: str,
        data: dict[str, Any],
        rules: tuple[Rule, ...],
    ) -> Profile:
        violations = check_required(data, rules)
        if violations:
            raise BadRequest(violations)

        async with self._store_errors(f"add_{collection}"):
            profile = await self._require(owner_id)
            entries = list(getattr(profile, collection) or [])
            entry = {"id": new_entry_id(entries), **data}
            setattr(profile, collection, prepend_entry(entries, entry))
            await self.db.commit()
            logger.info(f"{collection}_added", user_id=str(owner_id), entry_id=entry["id"])
            return await self._require(owner_id)

    async def _remove_entry(self, owner_id: UUID, collection: str, entry_id: str) -> Profile:
        async with self._store_errors(f"remove_{collection}"):
            profile = await self._require(owner_id)
            entries = list(getattr(profile, collection) or [])
            remaining = remove_entry(entries, entry_id, legacy=self.legacy_entry_removal)
            if remaining is None:
                raise NotFound(f"{collection.capitalize()} entry not found")
            setattr(profile, collection, remaining)
            await self.db.commit()
            logger.info(f"{collection}_removed", user_id=str(owner_id), entry_id=entry_id)
            return await self._require(owner_id)

    async def add_experience(self, owner_id: UUID, entry: ExperienceRequest) -> Profile:
        return await self._add_entry(owner_id, "experience", entry.to_entry_data(), EXPERIENCE_RULES)

    async def remove_experience(self, owner_id: UUID, entry_id: str) -> Profile:
        return await self._remove_entry(owner_id, "experience", entry_id)

    async def add_education(self, owner_id: UUID, entry: EducationRequest) -> Profile:
        return await self._add_entry(owner_id, "education", entry.to_entry_data(), EDUCATION_RULES)

    async def remove_education(self, owner_id: UUID, entry_id: str) -> Profile:
        return await self._remove_entry(owner_id, "education", entry_id)
