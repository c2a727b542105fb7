"""Database models"""
from app.models.room import Room, RoomMembership
from app.models.dj_session import DJSession, SessionStatus
from app.models.queue_item import QueueItem
from app.models.vote import Vote, VoteType

__all__ = [
    "Room",
    "RoomMembership",
    "DJSession",
    "SessionStatus",
    "QueueItem",
    "Vote",
    "VoteType",
]
