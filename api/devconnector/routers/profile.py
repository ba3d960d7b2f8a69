"""Profile router: the caller's profile, public lookups and GitHub repos."""

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.auth.dependencies import get_current_user
from devconnector.config import settings
from devconnector.database import get_db
from devconnector.middleware.rate_limit import limiter
from devconnector.models.profile import Profile
from devconnector.models.user import User
from devconnector.schemas.profile import (
    EducationEntry,
    EducationRequest,
    ExperienceEntry,
    ExperienceRequest,
    MessageResponse,
    OwnerSummary,
    ProfileRequest,
    ProfileResponse,
    SocialLinks,
)
from devconnector.services.github import GitHubConfig, RepositoryProxy
from devconnector.services.profile import ProfileService

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])


def get_profile_service(db: AsyncSession = Depends(get_db)) -> ProfileService:
    return ProfileService(
        db,
        legacy_entry_removal=settings.legacy_entry_removal,
        list_delay_seconds=settings.profile_list_delay_seconds,
    )


def get_repository_proxy() -> RepositoryProxy:
    return RepositoryProxy(GitHubConfig.from_settings(settings))


def _profile_response(profile: Profile) -> ProfileResponse:
    """Build the response, attaching the owner's name and avatar."""
    return ProfileResponse(
        id=str(profile.id),
        user=OwnerSummary(
            id=str(profile.user.id),
            name=profile.user.name,
            avatar=profile.user.avatar,
        ),
        company=profile.company,
        website=profile.website,
        location=profile.location,
        status=profile.status,
        skills=profile.skills or [],
        bio=profile.bio,
        github_username=profile.github_username,
        social=SocialLinks(**(profile.social or {})),
        experience=[ExperienceEntry.model_validate(e) for e in profile.experience or []],
        education=[EducationEntry.model_validate(e) for e in profile.education or []],
        date=profile.date.isoformat() if profile.date else None,
    )


# --- Own profile ---


@router.get(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def get_own_profile(
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Get the authenticated user's profile."""
    profile = await service.get_own(user.id)
    return _profile_response(profile)


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def upsert_profile(
    data: ProfileRequest,
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """
    Create or update the authenticated user's profile.

    Only the provided fields are written; everything else is kept.
    """
    profile = await service.upsert(user.id, data)
    return _profile_response(profile)


@router.delete(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_own_profile(
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> MessageResponse:
    """Delete the authenticated user's posts, profile and account."""
    await service.delete_own(user.id)
    return MessageResponse(msg="User deleted")


# --- Public lookups ---


@router.get(
    "",
    response_model=list[ProfileResponse],
    status_code=status.HTTP_200_OK,
)
async def list_profiles(
    service: ProfileService = Depends(get_profile_service),
) -> list[ProfileResponse]:
    """List every profile. No pagination."""
    profiles = await service.list_all()
    return [_profile_response(p) for p in profiles]


@router.get(
    "/user/{user_id}",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def get_profile_by_user(
    user_id: str,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Get a profile by its owner's user ID."""
    profile = await service.get_by_owner(user_id)
    return _profile_response(profile)


# --- Experience ---


@router.put(
    "/experience",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def add_experience(
    data: ExperienceRequest,
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Add a work experience entry at the top of the list."""
    profile = await service.add_experience(user.id, data)
    return _profile_response(profile)


@router.delete(
    "/experience/{exp_id}",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_experience(
    exp_id: str,
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Remove a work experience entry."""
    profile = await service.remove_experience(user.id, exp_id)
    return _profile_response(profile)


# --- Education ---


@router.put(
    "/education",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def add_education(
    data: EducationRequest,
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Add an education entry at the top of the list."""
    profile = await service.add_education(user.id, data)
    return _profile_response(profile)


@router.delete(
    "/education/{edu_id}",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_education(
    edu_id: str,
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Remove an education entry."""
    profile = await service.remove_education(user.id, edu_id)
    return _profile_response(profile)


# --- GitHub ---


@router.get(
    "/github/{username}",
    status_code=status.HTTP_200_OK,
)
@limiter.limit(settings.github_rate_limit)
async def get_github_repos(
    request: Request,  # noqa: ARG001  (required by slowapi)
    username: str,
    proxy: RepositoryProxy = Depends(get_repository_proxy),
) -> Any:
    """Get the user's five oldest-created GitHub repositories, as GitHub returns them."""
    return await proxy.fetch_repositories(username)
