"""Room service for rooms and room membership"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.models.room import Room, RoomMembership
from app.models.dj_session import DJSession, SessionStatus

logger = logging.getLogger(__name__)


class RoomService:
    """Service for room-related operations"""

    def __init__(self, db: Session):
        """
        Initialize room service

        Args:
            db: Database session
        """
        self.db = db

    def create_room(self, user_id: str, name: str, description: str = None, is_private: bool = False) -> Room:
        """
        Create a room; the creator becomes its first member

        Args:
            user_id: Creator user ID
            name: Room display name
            description: Optional description
            is_private: Whether the room is invite-only

        Returns:
            Created Room instance
        """
        room = Room(
            name=name,
            description=description,
            is_private=is_private,
            created_by_id=user_id
        )
        self.db.add(room)
        self.db.flush()

        self.db.add(RoomMembership(room_id=room.id, user_id=user_id))
        self.db.commit()

        logger.info(f"Created room {room.id} ({name}) for user {user_id}")
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.db.query(Room).filter(Room.id == room_id).first()

    def get_members(self, room_id: str) -> List[RoomMembership]:
        """
        Get memberships of a room, oldest first

        Args:
            room_id: Room UUID

        Returns:
            List of RoomMembership instances
        """
        return self.db.query(RoomMembership).filter(
            RoomMembership.room_id == room_id
        ).order_by(RoomMembership.joined_at).all()

    def is_member(self, room_id: str, user_id: str) -> bool:
        return self.db.query(RoomMembership).filter(
            RoomMembership.room_id == room_id,
            RoomMembership.user_id == user_id
        ).first() is not None

    def add_member(self, room_id: str, user_id: str) -> RoomMembership:
        """
        Add a user to a room. Existing memberships are returned unchanged.

        Args:
            room_id: Room UUID
            user_id: User ID

        Returns:
            The new or existing RoomMembership
        """
        membership = self.db.query(RoomMembership).filter(
            RoomMembership.room_id == room_id,
            RoomMembership.user_id == user_id
        ).first()
        if membership:
            logger.debug(f"User {user_id} already a member of room {room_id}")
            return membership

        membership = RoomMembership(room_id=room_id, user_id=user_id)
        self.db.add(membership)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent join inserted the same membership first
            self.db.rollback()
            return self.db.query(RoomMembership).filter(
                RoomMembership.room_id == room_id,
                RoomMembership.user_id == user_id
            ).one()
        logger.info(f"User {user_id} joined room {room_id}")
        return membership

    def remove_member(self, room_id: str, user_id: str) -> int:
        """
        Remove a user from a room. Not being a member is not an error.

        Args:
            room_id: Room UUID
            user_id: User ID

        Returns:
            Number of membership rows removed
        """
        count = self.db.query(RoomMembership).filter(
            RoomMembership.room_id == room_id,
            RoomMembership.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.commit()
        if count:
            logger.info(f"User {user_id} left room {room_id}")
        return count

    def get_active_session(self, room_id: str) -> Optional[DJSession]:
        return self.db.query(DJSession).filter(
            DJSession.room_id == room_id,
            DJSession.status == SessionStatus.ACTIVE
        ).first()
