"""Profile model: one professional profile document per user."""

import uuid

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Column,
    ForeignKey,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from devconnector.database import Base
from devconnector.models.user import utcnow


class Profile(Base):
    """
    User profile document.

    Scalar fields are plain columns. ``experience`` and ``education`` are
    embedded, ordered lists of entries (newest first), each entry a dict with
    its own ``id``. Lists are always reassigned, never mutated in place, so
    the ORM sees every change.
    """

    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    company = Column(Text)
    website = Column(Text)
    location = Column(Text)
    status = Column(Text, nullable=False)
    skills = Column(JSON)
    bio = Column(Text)
    github_username = Column(Text)
    social = Column(JSON)
    experience = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    date = Column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="profile")
