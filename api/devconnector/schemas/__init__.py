"""Pydantic schemas for request/response validation."""

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

__all__ = [
    "ProfileRequest",
    "ProfileResponse",
    "ExperienceRequest",
    "ExperienceEntry",
    "EducationRequest",
    "EducationEntry",
    "SocialLinks",
    "OwnerSummary",
    "MessageResponse",
]
