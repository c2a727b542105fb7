"""Room and room membership models"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime
import uuid

from app.database import Base


class Room(Base):
    """Room model representing a chat/listening room that can host DJ sessions"""

    __tablename__ = "rooms"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_private = Column(Boolean, default=False, nullable=False)
    created_by_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, server_default=func.now())

    # Relationships
    memberships = relationship("RoomMembership", back_populates="room", cascade="all, delete-orphan")
    sessions = relationship("DJSession", back_populates="room", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Room(id={self.id}, name='{self.name}', is_private={self.is_private})>"


class RoomMembership(Base):
    """RoomMembership model linking a user to a room"""

    __tablename__ = "room_memberships"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    room_id = Column(String, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    joined_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())

    # Relationships
    room = relationship("Room", back_populates="memberships")

    # One membership per user per room
    __table_args__ = (
        UniqueConstraint('room_id', 'user_id', name='unique_room_membership'),
    )

    def __repr__(self):
        return f"<RoomMembership(room_id={self.room_id}, user_id={self.user_id})>"
