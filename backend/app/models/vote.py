"""Vote model"""
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime
import uuid
import enum

from app.database import Base


class VoteType(str, enum.Enum):
    """Direction of a vote on a queue item"""
    UPVOTE = "UPVOTE"
    DOWNVOTE = "DOWNVOTE"


class Vote(Base):
    """Vote model representing one user's vote on one queue item"""

    __tablename__ = "votes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    queue_item_id = Column(String, ForeignKey("queue_items.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    vote_type = Column(SQLEnum(VoteType), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, server_default=func.now())

    # Relationships
    queue_item = relationship("QueueItem", back_populates="votes")

    # A user holds a single vote per item; voting again changes it
    __table_args__ = (
        UniqueConstraint('queue_item_id', 'user_id', name='unique_queue_item_vote'),
    )

    def __repr__(self):
        return f"<Vote(id={self.id}, queue_item_id={self.queue_item_id}, user_id={self.user_id}, vote_type={self.vote_type})>"
