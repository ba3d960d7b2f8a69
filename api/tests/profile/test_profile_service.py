"""
Tests for ProfileService and the entry list helpers, below the HTTP layer.
"""

from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.errors import BadRequest, InvalidIdentifier, NotFound, PartialFailure, StoreUnavailable
from devconnector.models.post import Post
from devconnector.models.user import User
from devconnector.schemas.profile import ExperienceRequest, ProfileRequest
from devconnector.services.account import AccountService
from devconnector.services.profile import (
    ProfileService,
    build_profile_fields,
    find_entry_index,
    new_entry_id,
    parse_skills,
    prepend_entry,
    remove_entry,
)


def _experience(title: str) -> ExperienceRequest:
    return ExperienceRequest.model_validate(
        {"title": title, "company": "Acme", "from": "2021-03-01"}
    )


class TestEntryHelpers:
    """Pure list edits."""

    def test_prepend_puts_entry_first(self):
        entries = [{"id": "a"}]
        result = prepend_entry(entries, {"id": "b"})
        assert [e["id"] for e in result] == ["b", "a"]
        assert entries == [{"id": "a"}]

    def test_find_entry_index(self):
        entries = [{"id": "b"}, {"id": "a"}]
        assert find_entry_index(entries, "a") == 1
        assert find_entry_index(entries, "zzz") == -1

    def test_remove_entry_keeps_order(self):
        entries = [{"id": "c"}, {"id": "b"}, {"id": "a"}]
        assert remove_entry(entries, "b") == [{"id": "c"}, {"id": "a"}]

    def test_remove_unknown_entry_returns_none(self):
        assert remove_entry([{"id": "a"}], "zzz") is None

    def test_legacy_remove_unknown_entry_drops_last(self):
        entries = [{"id": "b"}, {"id": "a"}]
        assert remove_entry(entries, "zzz", legacy=True) == [{"id": "b"}]

    def test_legacy_remove_on_empty_list_is_noop(self):
        assert remove_entry([], "zzz", legacy=True) == []

    def test_new_entry_id_is_unique_among_siblings(self):
        entries = [{"id": new_entry_id([])} for _ in range(5)]
        assert new_entry_id(entries) not in {e["id"] for e in entries}


class TestFieldBuilding:
    """Partial field sets for upsert."""

    def test_parse_skills_trims_and_drops_empty_tokens(self):
        assert parse_skills(" a, b ,c") == ["a", "b", "c"]
        assert parse_skills("a,, ,b,") == ["a", "b"]

    def test_only_present_fields_are_collected(self):
        fields = build_profile_fields(ProfileRequest(company="X", bio="", youtube="yt"))
        assert fields == {"company": "X", "social": {"youtube": "yt"}}

    def test_whitespace_only_values_are_absent(self):
        fields = build_profile_fields(ProfileRequest(status="  ", website="\t", twitter=" "))
        assert fields == {}

    def test_blank_skills_string_is_absent(self):
        assert "skills" not in build_profile_fields(ProfileRequest(skills=" , "))

    def test_empty_skills_list_is_kept(self):
        assert build_profile_fields(ProfileRequest(skills=[]))["skills"] == []


class TestProfileService:
    """ProfileService against the test database."""

    async def test_upsert_then_update_keeps_single_profile(
        self, db_session: AsyncSession, test_user: dict
    ):
        service = ProfileService(db_session)
        owner_id = test_user["user_id"]

        created = await service.upsert(owner_id, ProfileRequest(status="Developer", company="X"))
        updated = await service.upsert(owner_id, ProfileRequest(bio="Y"))

        assert created.id == updated.id
        assert updated.company == "X"
        assert updated.bio == "Y"
        assert len(await service.list_all()) == 1

    async def test_create_without_status_is_rejected(
        self, db_session: AsyncSession, test_user: dict
    ):
        service = ProfileService(db_session)
        with pytest.raises(BadRequest) as exc_info:
            await service.upsert(test_user["user_id"], ProfileRequest(company="X"))
        assert exc_info.value.violations[0]["param"] == "status"

    async def test_get_own_without_profile(self, db_session: AsyncSession, test_user: dict):
        with pytest.raises(NotFound):
            await ProfileService(db_session).get_own(test_user["user_id"])

    async def test_add_then_remove_experience(self, db_session: AsyncSession, test_user: dict):
        service = ProfileService(db_session)
        owner_id = test_user["user_id"]
        await service.upsert(owner_id, ProfileRequest(status="Developer"))

        await service.add_experience(owner_id, _experience("A"))
        profile = await service.add_experience(owner_id, _experience("B"))
        b, a = profile.experience
        assert (b["title"], a["title"]) == ("B", "A")

        profile = await service.remove_experience(owner_id, a["id"])
        assert [e["title"] for e in profile.experience] == ["B"]

    async def test_remove_unknown_experience_raises(
        self, db_session: AsyncSession, test_user: dict
    ):
        service = ProfileService(db_session)
        owner_id = test_user["user_id"]
        await service.upsert(owner_id, ProfileRequest(status="Developer"))
        await service.add_experience(owner_id, _experience("A"))

        with pytest.raises(NotFound):
            await service.remove_experience(owner_id, "missing")

    async def test_legacy_mode_removes_last_entry_for_unknown_id(
        self, db_session: AsyncSession, test_user: dict
    ):
        service = ProfileService(db_session, legacy_entry_removal=True)
        owner_id = test_user["user_id"]
        await service.upsert(owner_id, ProfileRequest(status="Developer"))
        await service.add_experience(owner_id, _experience("A"))
        await service.add_experience(owner_id, _experience("B"))

        profile = await service.remove_experience(owner_id, "missing")
        assert [e["title"] for e in profile.experience] == ["B"]

    async def test_invalid_owner_id_skips_store(self):
        db = AsyncMock(spec=AsyncSession)
        service = ProfileService(db)

        with pytest.raises(InvalidIdentifier):
            await service.get_by_owner("not-an-id")

        db.execute.assert_not_awaited()

    async def test_delete_own_removes_everything(
        self, db_session: AsyncSession, test_user: dict
    ):
        service = ProfileService(db_session)
        owner_id = test_user["user_id"]
        await service.upsert(owner_id, ProfileRequest(status="Developer"))
        db_session.add(Post(user_id=owner_id, text="hello"))
        await db_session.commit()

        await service.delete_own(owner_id)

        with pytest.raises(NotFound):
            await service.get_own(owner_id)
        assert await AccountService(db_session).count_posts(owner_id) == 0


class _FailingAccounts(AccountService):
    """AccountService whose chosen step fails like a lost connection."""

    def __init__(self, db: AsyncSession, fail_on: str):
        super().__init__(db)
        self.fail_on = fail_on

    async def delete_posts(self, user_id: UUID) -> int:
        if self.fail_on == "posts":
            raise SQLAlchemyError("connection lost")
        return await super().delete_posts(user_id)

    async def delete_account(self, user_id: UUID) -> None:
        if self.fail_on == "account":
            raise SQLAlchemyError("connection lost")
        await super().delete_account(user_id)


class TestDeleteOwnFailures:
    """Partial failure reporting of the account deletion steps."""

    async def test_failure_after_first_step_is_partial(
        self, db_session: AsyncSession, test_user: dict
    ):
        owner_id = test_user["user_id"]
        service = ProfileService(db_session, accounts=_FailingAccounts(db_session, "account"))
        await service.upsert(owner_id, ProfileRequest(status="Developer"))

        with pytest.raises(PartialFailure) as exc_info:
            await service.delete_own(owner_id)

        assert exc_info.value.completed == ["posts", "profile"]
        assert exc_info.value.failed == "account"
        # Completed steps stay committed, the account is still there
        with pytest.raises(NotFound):
            await service.get_own(owner_id)
        users = await db_session.scalar(select(func.count(User.id)).where(User.id == owner_id))
        assert users == 1

    async def test_failure_in_first_step_is_store_unavailable(
        self, db_session: AsyncSession, test_user: dict
    ):
        owner_id = test_user["user_id"]
        service = ProfileService(db_session, accounts=_FailingAccounts(db_session, "posts"))
        await service.upsert(owner_id, ProfileRequest(status="Developer"))

        with pytest.raises(StoreUnavailable):
            await service.delete_own(owner_id)

        profile = await service.get_own(owner_id)
        assert profile.status == "Developer"
