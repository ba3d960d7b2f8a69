"""Profile-related Pydantic schemas."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProfileRequest(BaseModel):
    """
    Request to create or update the caller's profile.

    Every field is optional; empty values are treated as absent so an update
    never blanks a stored field. ``skills`` is a comma-separated string, or a
    list (an empty list clears the stored skills).
    """

    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    status: str | None = None
    github_username: str | None = None
    skills: str | list[str] | None = None
    youtube: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    linkedin: str | None = None


class _EntryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_date: dt.date | None = Field(default=None, alias="from")
    to_date: dt.date | None = Field(default=None, alias="to")
    current: bool = False
    description: str | None = None

    @field_validator("from_date", "to_date", mode="before")
    @classmethod
    def blank_date_is_missing(cls, v: Any) -> Any:
        """Treat an empty date string as not provided."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_entry_data(self) -> dict[str, Any]:
        """Dump the entry the way it is stored and validated (wire names)."""
        return self.model_dump(mode="json", by_alias=True)


class ExperienceRequest(_EntryRequest):
    """Request to add a work experience entry."""

    title: str | None = None
    company: str | None = None
    location: str | None = None


class EducationRequest(_EntryRequest):
    """Request to add an education entry."""

    school: str | None = None
    degree: str | None = None
    fieldofstudy: str | None = None


class _Entry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_date: dt.date | None = Field(default=None, alias="from")
    to_date: dt.date | None = Field(default=None, alias="to")
    current: bool = False
    description: str | None = None


class ExperienceEntry(_Entry):
    """Stored work experience entry."""

    title: str
    company: str
    location: str | None = None


class EducationEntry(_Entry):
    """Stored education entry."""

    school: str
    degree: str
    fieldofstudy: str


class SocialLinks(BaseModel):
    """Known social network links."""

    youtube: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    linkedin: str | None = None


class OwnerSummary(BaseModel):
    """Basic identity of a profile's owner."""

    id: str
    name: str
    avatar: str | None


class ProfileResponse(BaseModel):
    """A profile with its owner's identity attached."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user: OwnerSummary
    company: str | None
    website: str | None
    location: str | None
    status: str
    skills: list[str]
    bio: str | None
    github_username: str | None
    social: SocialLinks
    experience: list[ExperienceEntry]
    education: list[EducationEntry]
    date: str | None


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    msg: str
