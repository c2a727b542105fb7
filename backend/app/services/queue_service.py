"""Queue service for managing DJ session track queues"""
from sqlalchemy import update
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from app.models.dj_session import DJSession, SessionStatus
from app.models.queue_item import QueueItem
from app.services.errors import SessionEndedError

logger = logging.getLogger(__name__)


class QueueService:
    """Service for queue-related operations"""

    def __init__(self, db: Session):
        """
        Initialize queue service

        Args:
            db: Database session
        """
        self.db = db

    def add_track(self, session_id: str, user_id: str, track_ref: Dict[str, Any]) -> Optional[QueueItem]:
        """
        Append a track request to the end of a session's queue

        Args:
            session_id: DJ session UUID
            user_id: ID of the user adding the track
            track_ref: Track metadata

        Returns:
            Created QueueItem, or None if the session does not exist

        Raises:
            SessionEndedError: If the session has ended
        """
        session = self.db.query(DJSession).filter(DJSession.id == session_id).first()
        if not session:
            return None
        if session.status == SessionStatus.ENDED:
            raise SessionEndedError("Session has ended")

        position = self._allocate_position(session_id)

        queue_item = QueueItem(
            session_id=session_id,
            added_by_user_id=user_id,
            track_ref=track_ref,
            position=position,
            upvotes=0,
            downvotes=0,
            skipped=False
        )

        self.db.add(queue_item)
        self.db.commit()

        logger.info(f"User {user_id} added track to session {session_id} at position {position}")
        return queue_item

    def _allocate_position(self, session_id: str) -> int:
        """
        Hand out the next queue position for a session.

        The increment is a single UPDATE on the session row, so concurrent
        callers are serialized by the row lock and never share a position.

        Args:
            session_id: DJ session UUID

        Returns:
            The newly allocated position (1 for the first item)
        """
        self.db.execute(
            update(DJSession)
            .where(DJSession.id == session_id)
            .values(last_position=DJSession.last_position + 1)
            .execution_options(synchronize_session=False)
        )
        return self.db.query(DJSession.last_position).filter(DJSession.id == session_id).scalar()

    def _pending_query(self, session_id: str):
        return self.db.query(QueueItem).filter(
            QueueItem.session_id == session_id,
            QueueItem.played_at.is_(None),
            QueueItem.skipped == False  # noqa: E712
        ).order_by(QueueItem.upvotes.desc(), QueueItem.position.asc())

    def get_queue(self, session_id: str) -> List[QueueItem]:
        """
        Get pending items of a session queue, highest voted first

        Args:
            session_id: DJ session UUID

        Returns:
            Unplayed, unskipped QueueItems ordered by upvotes desc then position asc
        """
        return self._pending_query(session_id).all()

    def get_next_item(self, session_id: str) -> Optional[QueueItem]:
        """
        Get the item that should play next

        Args:
            session_id: DJ session UUID

        Returns:
            Top pending QueueItem or None if nothing is pending
        """
        return self._pending_query(session_id).first()

    def get_item(self, queue_item_id: str) -> Optional[QueueItem]:
        return self.db.query(QueueItem).filter(QueueItem.id == queue_item_id).first()

    def get_session_items(self, session_id: str) -> List[QueueItem]:
        """
        Get every item of a session queue, played or not, in insertion order

        Args:
            session_id: DJ session UUID

        Returns:
            List of QueueItems ordered by position
        """
        return self.db.query(QueueItem).filter(
            QueueItem.session_id == session_id
        ).order_by(QueueItem.position).all()
