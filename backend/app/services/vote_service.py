"""Vote service for recording votes on queued tracks"""
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.models.dj_session import DJSession, SessionStatus
from app.models.queue_item import QueueItem
from app.models.vote import Vote, VoteType
from app.services.errors import SessionEndedError

logger = logging.getLogger(__name__)


class VoteService:
    """Service for vote-related operations"""

    def __init__(self, db: Session):
        """
        Initialize vote service

        Args:
            db: Database session
        """
        self.db = db

    def vote(self, user_id: str, queue_item_id: str, vote_type: VoteType, session_id: str = None) -> Optional[Vote]:
        """
        Cast or change a user's vote on a queue item.

        A user holds at most one vote per item; voting again overwrites the
        vote type. The item's upvote/downvote counts are recomputed from the
        vote rows and committed together with the vote.

        Args:
            user_id: ID of the voting user
            queue_item_id: Queue item UUID
            vote_type: UPVOTE or DOWNVOTE
            session_id: If given, the item must belong to this session

        Returns:
            The stored Vote, or None if the queue item does not exist

        Raises:
            SessionEndedError: If the item's session has ended
        """
        vote_type = VoteType(vote_type)

        # A concurrent first vote from the same user can win the insert;
        # retry once so ours becomes an update of that row
        for attempt in range(2):
            # Votes on one item serialize on its row before the recount
            queue_item = self.db.query(QueueItem).filter(
                QueueItem.id == queue_item_id
            ).with_for_update().first()
            if not queue_item:
                return None
            if session_id is not None and queue_item.session_id != session_id:
                return None

            status = self.db.query(DJSession.status).filter(DJSession.id == queue_item.session_id).scalar()
            if status == SessionStatus.ENDED:
                raise SessionEndedError("Session has ended")

            try:
                vote = self._upsert_vote(queue_item, user_id, vote_type)
                self._recount(queue_item)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if attempt:
                    raise
                logger.debug(f"Vote insert for item {queue_item_id} by {user_id} collided, retrying")
                continue

            logger.info(
                f"User {user_id} voted {vote_type.value} on queue item {queue_item_id} "
                f"({queue_item.upvotes} up / {queue_item.downvotes} down)"
            )
            return vote

    def _upsert_vote(self, queue_item: QueueItem, user_id: str, vote_type: VoteType) -> Vote:
        vote = self.db.query(Vote).filter(
            Vote.queue_item_id == queue_item.id,
            Vote.user_id == user_id
        ).first()
        if vote:
            vote.vote_type = vote_type
        else:
            vote = Vote(queue_item_id=queue_item.id, user_id=user_id, vote_type=vote_type)
            self.db.add(vote)
        self.db.flush()
        return vote

    def _recount(self, queue_item: QueueItem):
        """
        Recompute cached vote counts of a queue item from its vote rows

        Args:
            queue_item: QueueItem to update (not committed)
        """
        counts = dict(
            self.db.query(Vote.vote_type, func.count(Vote.id))
            .filter(Vote.queue_item_id == queue_item.id)
            .group_by(Vote.vote_type)
            .all()
        )
        queue_item.upvotes = counts.get(VoteType.UPVOTE, 0)
        queue_item.downvotes = counts.get(VoteType.DOWNVOTE, 0)

    def get_user_vote(self, queue_item_id: str, user_id: str) -> Optional[Vote]:
        return self.db.query(Vote).filter(
            Vote.queue_item_id == queue_item_id,
            Vote.user_id == user_id
        ).first()
