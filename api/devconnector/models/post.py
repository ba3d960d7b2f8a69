"""Post model for content authored by users."""

import uuid

from sqlalchemy import (
    TIMESTAMP,
    Column,
    ForeignKey,
    Index,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from devconnector.database import Base
from devconnector.models.user import utcnow


class Post(Base):
    """Post written by a user. Removed together with its author's account."""

    __tablename__ = "posts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    text = Column(Text, nullable=False)
    name = Column(Text)
    avatar = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (
        Index("idx_posts_user", user_id),
        Index("idx_posts_created", created_at.desc()),
    )

    author = relationship("User", foreign_keys=[user_id])
