import uuid

from sqlalchemy import Column, String, Text, Uuid
from sqlalchemy.orm import relationship

from marketplace_messaging.database import Base
from marketplace_messaging.models.db.timestamps import UTCDateTime, utcnow


def make_pair_key(first_user_id: uuid.UUID, second_user_id: uuid.UUID) -> str:
    """Canonical key for an unordered pair of users."""
    low, high = sorted([str(first_user_id), str(second_user_id)])
    return f"{low}:{high}"


class ConversationModel(Base):
    """SQLAlchemy model for conversations table."""

    __tablename__ = "conversations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Unique per two-party conversation, blocks duplicate creation under races
    pair_key = Column(String(80), unique=True)
    last_message = Column(Text)
    last_message_at = Column(UTCDateTime, index=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    messages = relationship(
        "MessageModel", back_populates="conversation", cascade="all, delete-orphan"
    )
    participants = relationship(
        "ParticipantModel", back_populates="conversation", cascade="all, delete-orphan"
    )
