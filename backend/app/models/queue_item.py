"""Queue item model"""
from sqlalchemy import Column, String, Integer, Boolean, JSON, DateTime, ForeignKey, UniqueConstraint, select
from sqlalchemy.orm import column_property, relationship
from sqlalchemy.sql import func
from datetime import datetime
import uuid

from app.database import Base
from app.models.dj_session import DJSession


class QueueItem(Base):
    """QueueItem model representing a track request in a DJ session queue"""

    __tablename__ = "queue_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String, ForeignKey("dj_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    added_by_user_id = Column(String, nullable=False)
    track_ref = Column(JSON, nullable=False)  # Track metadata as submitted by the client
    position = Column(Integer, nullable=False)  # Insertion order within the session, starts at 1
    upvotes = Column(Integer, default=0, nullable=False)  # Written only by VoteService
    downvotes = Column(Integer, default=0, nullable=False)  # Written only by VoteService
    played_at = Column(DateTime, nullable=True)  # Set when the item becomes now-playing
    skipped = Column(Boolean, default=False, nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())

    # Relationships
    session = relationship("DJSession", back_populates="queue_items", foreign_keys=[session_id])
    votes = relationship("Vote", back_populates="queue_item", cascade="all, delete-orphan")

    # Positions are handed out once per session
    __table_args__ = (
        UniqueConstraint('session_id', 'position', name='unique_session_position'),
    )

    @property
    def vote_count(self) -> int:
        return (self.upvotes or 0) + (self.downvotes or 0)

    @property
    def is_pending(self) -> bool:
        return self.played_at is None and not self.skipped

    def __repr__(self):
        return f"<QueueItem(id={self.id}, session_id={self.session_id}, position={self.position}, upvotes={self.upvotes})>"


# Number of queue items, loaded with the session row
DJSession.queue_count = column_property(
    select(func.count(QueueItem.id))
    .where(QueueItem.session_id == DJSession.id)
    .correlate_except(QueueItem)
    .scalar_subquery()
)
