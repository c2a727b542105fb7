"""DJ Session model"""
from sqlalchemy import Column, String, Integer, Boolean, JSON, DateTime, ForeignKey, Index, Enum as SQLEnum, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime
import uuid
import enum

from app.database import Base


class SessionStatus(str, enum.Enum):
    """DJ session lifecycle status"""
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"


class DJSession(Base):
    """DJSession model representing a collaborative listening session"""

    __tablename__ = "dj_sessions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    room_id = Column(String, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String, nullable=True)
    is_private = Column(Boolean, default=False, nullable=False)
    host_id = Column(String, nullable=False, index=True)
    current_dj_id = Column(String, nullable=True)
    status = Column(SQLEnum(SessionStatus), default=SessionStatus.ACTIVE, nullable=False, index=True)
    now_playing_ref = Column(JSON(none_as_null=True), nullable=True)  # Track metadata of the current track
    now_playing_start = Column(DateTime, nullable=True)
    now_playing_item_id = Column(
        String,
        ForeignKey("queue_items.id", ondelete="SET NULL", use_alter=True, name="fk_dj_sessions_now_playing_item"),
        nullable=True,
    )
    genre = Column(String, nullable=False)
    tags = Column(JSON, default=list)
    last_position = Column(Integer, default=0, nullable=False, server_default="0")  # Highest queue position handed out
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, server_default=func.now())
    ended_at = Column(DateTime, nullable=True)

    # Relationships
    room = relationship("Room", back_populates="sessions")
    queue_items = relationship(
        "QueueItem",
        back_populates="session",
        cascade="all, delete-orphan",
        foreign_keys="QueueItem.session_id",
        order_by="QueueItem.position",
    )

    # At most one active session per room
    __table_args__ = (
        Index(
            "unique_active_session_per_room",
            "room_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
    )

    def __repr__(self):
        return f"<DJSession(id={self.id}, room_id={self.room_id}, status={self.status})>"
