"""Session service for managing DJ sessions and their now-playing state"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from app.config import settings
from app.models.dj_session import DJSession, SessionStatus
from app.models.queue_item import QueueItem
from app.models.room import Room
from app.services.errors import (
    ActiveSessionExistsError,
    ForbiddenActionError,
    RoomNotFoundError,
    SessionEndedError,
)
from app.services.queue_service import QueueService
from app.services.room_service import RoomService

logger = logging.getLogger(__name__)


class SessionService:
    """Service for DJ session operations"""

    def __init__(self, db: Session):
        """
        Initialize session service

        Args:
            db: Database session
        """
        self.db = db
        self.queue_service = QueueService(db)
        self.room_service = RoomService(db)

    def create(
        self,
        host_id: str,
        genre: str,
        room_id: str = None,
        name: str = None,
        is_private: bool = False,
        initial_track: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
    ) -> DJSession:
        """
        Start a new DJ session, standalone or linked to a room

        Args:
            host_id: ID of the hosting user (also the first DJ)
            genre: Session genre
            room_id: Optional room to run the session in
            name: Optional display name
            is_private: Whether the session is private
            initial_track: Optional track metadata to start playing immediately
            tags: Optional list of tags

        Returns:
            Created DJSession instance

        Raises:
            RoomNotFoundError: If room_id is given and the room does not exist
            ActiveSessionExistsError: If the room already has an active session
        """
        if room_id:
            room = self.db.query(Room).filter(Room.id == room_id).first()
            if not room:
                raise RoomNotFoundError("Room not found")
            if self.room_service.get_active_session(room_id):
                raise ActiveSessionExistsError("Room already has an active session")

        session = DJSession(
            room_id=room_id or None,
            name=name or None,
            is_private=bool(is_private),
            host_id=host_id,
            current_dj_id=host_id,
            status=SessionStatus.ACTIVE,
            now_playing_ref=initial_track or None,
            now_playing_start=datetime.utcnow() if initial_track else None,
            genre=genre,
            tags=list(tags or []),
            last_position=0
        )
        self.db.add(session)

        try:
            self.db.commit()
        except IntegrityError:
            # Another session for the same room became active after our check
            self.db.rollback()
            raise ActiveSessionExistsError("Room already has an active session")

        logger.info(f"Created DJ session {session.id} (room={room_id}, genre={genre}) hosted by {host_id}")
        return session

    def get_by_id(self, session_id: str) -> Optional[DJSession]:
        """
        Get session by ID

        Args:
            session_id: DJ session UUID

        Returns:
            DJSession instance or None
        """
        return self.db.query(DJSession).filter(DJSession.id == session_id).first()

    def get_active(self, limit: int = None) -> List[DJSession]:
        """
        Get active sessions, newest first

        Args:
            limit: Maximum number of sessions (falls back to the configured default)

        Returns:
            List of active DJSession instances
        """
        return self.db.query(DJSession).options(selectinload(DJSession.room)).filter(
            DJSession.status == SessionStatus.ACTIVE
        ).order_by(DJSession.created_at.desc()).limit(
            self._clamp_limit(limit, settings.active_sessions_limit)
        ).all()

    def get_recently_ended(self, limit: int = None) -> List[DJSession]:
        """
        Get ended sessions, most recently ended first

        Args:
            limit: Maximum number of sessions (falls back to the configured default)

        Returns:
            List of ended DJSession instances
        """
        return self.db.query(DJSession).options(selectinload(DJSession.room)).filter(
            DJSession.status == SessionStatus.ENDED
        ).order_by(DJSession.ended_at.desc()).limit(
            self._clamp_limit(limit, settings.ended_sessions_limit)
        ).all()

    @staticmethod
    def _clamp_limit(limit: Optional[int], default: int) -> int:
        if not limit or limit < 1:
            return default
        return min(limit, settings.max_list_limit)

    def join(self, session_id: str, user_id: str) -> Optional[DJSession]:
        """
        Join a session. Room-linked sessions add the user to the room.

        Args:
            session_id: DJ session UUID
            user_id: Joining user ID

        Returns:
            The DJSession, or None if it does not exist
        """
        session = self.get_by_id(session_id)
        if not session:
            return None

        if session.room_id:
            self.room_service.add_member(session.room_id, user_id)
        logger.info(f"User {user_id} joined session {session_id}")
        return session

    def leave(self, session_id: str, user_id: str) -> Optional[DJSession]:
        """
        Leave a session. Room-linked sessions remove the user from the room.

        Args:
            session_id: DJ session UUID
            user_id: Leaving user ID

        Returns:
            The DJSession, or None if it does not exist
        """
        session = self.get_by_id(session_id)
        if not session:
            return None

        if session.room_id:
            self.room_service.remove_member(session.room_id, user_id)
        logger.info(f"User {user_id} left session {session_id}")
        return session

    def skip_track(self, session_id: str, user_id: str) -> Optional[DJSession]:
        """
        Advance now-playing to the best pending queue item.

        The outgoing queue item is marked skipped and the incoming one is
        marked played, so both leave the pending queue. With nothing pending,
        now-playing is cleared.

        Args:
            session_id: DJ session UUID
            user_id: ID of the user requesting the skip

        Returns:
            Updated DJSession or None if it does not exist

        Raises:
            SessionEndedError: If the session has ended
        """
        session = self.db.query(DJSession).filter(
            DJSession.id == session_id
        ).with_for_update(of=DJSession).first()
        if not session:
            return None
        if session.status == SessionStatus.ENDED:
            raise SessionEndedError("Session has ended")

        now = datetime.utcnow()

        if session.now_playing_item_id:
            current_item = self.db.query(QueueItem).filter(
                QueueItem.id == session.now_playing_item_id
            ).first()
            if current_item:
                current_item.skipped = True

        next_item = self.queue_service.get_next_item(session_id)
        if next_item:
            next_item.played_at = now
            session.now_playing_ref = next_item.track_ref
            session.now_playing_start = now
            session.now_playing_item_id = next_item.id
            logger.info(f"User {user_id} skipped session {session_id} to queue item {next_item.id}")
        else:
            session.now_playing_ref = None
            session.now_playing_start = None
            session.now_playing_item_id = None
            logger.info(f"User {user_id} skipped session {session_id}; queue is empty")

        self.db.commit()
        return session

    def end(self, session_id: str, user_id: str) -> Optional[DJSession]:
        """
        End a session (host only)

        Args:
            session_id: DJ session UUID
            user_id: ID of the requesting user

        Returns:
            Updated DJSession or None if it does not exist

        Raises:
            ForbiddenActionError: If the caller is not the host
            SessionEndedError: If the session already ended
        """
        session = self.get_by_id(session_id)
        if not session:
            return None
        if session.host_id != user_id:
            raise ForbiddenActionError("Only host can end session")
        if session.status == SessionStatus.ENDED:
            raise SessionEndedError("Session has already ended")

        session.status = SessionStatus.ENDED
        session.ended_at = datetime.utcnow()
        self.db.commit()

        logger.info(f"Ended DJ session {session_id}")
        return session

    def delete(self, session_id: str, user_id: str) -> bool:
        """
        Delete a session with its queue and votes (host only)

        Args:
            session_id: DJ session UUID
            user_id: ID of the requesting user

        Returns:
            True if deleted, False if not found

        Raises:
            ForbiddenActionError: If the caller is not the host
        """
        session = self.get_by_id(session_id)
        if not session:
            return False
        if session.host_id != user_id:
            raise ForbiddenActionError("Only host can delete session")

        self.db.delete(session)
        self.db.commit()

        logger.info(f"Deleted DJ session {session_id}")
        return True
