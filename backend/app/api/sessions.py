"""DJ session API endpoints"""
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Literal
from pydantic import BaseModel, Field

from app.api.deps import get_current_user_id
from app.database import get_db
from app.models.dj_session import SessionStatus
from app.models.vote import VoteType
from app.services.errors import (
    ActiveSessionExistsError,
    ForbiddenActionError,
    RoomNotFoundError,
    SessionEndedError,
)
from app.services.queue_service import QueueService
from app.services.session_service import SessionService
from app.services.vote_service import VoteService

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


class TrackRef(BaseModel):
    """Track metadata, identified by the platform it comes from"""
    platform: Literal["spotify", "youtube", "soundcloud", "bandcamp", "apple_music", "upload"]
    title: str = Field(..., min_length=1)
    artist: str | None = None
    artwork: str | None = None
    duration: str | None = None  # Display duration, e.g. "3:30"
    url: str | None = None
    external_id: str | None = None  # Track ID on the platform

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CreateSessionRequest(BaseModel):
    genre: str = Field(..., min_length=1)
    room_id: str | None = None
    session_name: str | None = None
    is_private: bool = False
    initial_track: TrackRef | None = None
    tags: List[str] | None = None


class AddToQueueRequest(BaseModel):
    track_ref: TrackRef


class VoteRequest(BaseModel):
    vote_type: VoteType


class QueueItemResponse(BaseModel):
    id: str
    session_id: str
    added_by_user_id: str
    track_ref: Dict[str, Any]
    position: int
    upvotes: int
    downvotes: int
    vote_count: int
    played_at: datetime | None
    skipped: bool
    added_at: datetime | None

    class Config:
        from_attributes = True


class SessionRoomResponse(BaseModel):
    id: str
    name: str
    description: str | None

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    id: str
    room_id: str | None
    room: SessionRoomResponse | None
    name: str | None
    is_private: bool
    host_id: str
    current_dj_id: str | None
    status: SessionStatus
    now_playing_ref: Dict[str, Any] | None
    now_playing_start: datetime | None
    now_playing_item_id: str | None
    genre: str
    tags: List[str] | None
    queue_count: int
    created_at: datetime | None
    ended_at: datetime | None

    class Config:
        from_attributes = True


class SessionDetailResponse(SessionResponse):
    queue: List[QueueItemResponse]


class VoteResponse(BaseModel):
    id: str
    queue_item_id: str
    user_id: str
    vote_type: VoteType
    upvotes: int
    downvotes: int
    created_at: datetime | None


def _session_detail(session, queue_service: QueueService) -> SessionDetailResponse:
    items = queue_service.get_session_items(session.id)
    return SessionDetailResponse(
        **SessionResponse.model_validate(session).model_dump(),
        queue=[QueueItemResponse.model_validate(item) for item in items],
    )


@router.post("", response_model=SessionResponse, status_code=201)
def create_session(
    request: CreateSessionRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a new DJ session"""
    session_service = SessionService(db)
    try:
        session = session_service.create(
            user_id,
            request.genre,
            room_id=request.room_id,
            name=request.session_name,
            is_private=request.is_private,
            initial_track=request.initial_track.to_json() if request.initial_track else None,
            tags=request.tags,
        )
    except RoomNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ActiveSessionExistsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session


@router.get("/active", response_model=List[SessionResponse])
def get_active_sessions(
    limit: int | None = Query(None, description="Maximum number of sessions"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get all active DJ sessions"""
    return SessionService(db).get_active(limit)


@router.get("/recent/ended", response_model=List[SessionResponse])
def get_recently_ended_sessions(
    limit: int | None = Query(None, description="Maximum number of sessions"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get recently ended DJ sessions"""
    return SessionService(db).get_recently_ended(limit)


@router.get("/{session_id}", response_model=SessionDetailResponse)
def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get session details with its full queue in insertion order"""
    session = SessionService(db).get_by_id(session_id)
    if not session:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return _session_detail(session, QueueService(db))


@router.post("/{session_id}/join")
def join_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Join a session (adds room membership for room sessions)"""
    session = SessionService(db).join(session_id, user_id)
    if not session:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"message": "Joined session", "session": SessionResponse.model_validate(session)}


@router.post("/{session_id}/leave")
def leave_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Leave a session"""
    if not SessionService(db).leave(session_id, user_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"message": "Left session"}


@router.post("/{session_id}/queue", response_model=QueueItemResponse, status_code=201)
def add_to_queue(
    session_id: str,
    request: AddToQueueRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Add a track to the session queue"""
    queue_service = QueueService(db)
    try:
        queue_item = queue_service.add_track(session_id, user_id, request.track_ref.to_json())
    except SessionEndedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not queue_item:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return queue_item


@router.get("/{session_id}/queue", response_model=List[QueueItemResponse])
def get_queue(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get pending queue items, highest voted first"""
    if not SessionService(db).get_by_id(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return QueueService(db).get_queue(session_id)


@router.post("/{session_id}/queue/{queue_item_id}/vote", response_model=VoteResponse, status_code=201)
def vote(
    session_id: str,
    queue_item_id: str,
    request: VoteRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Vote on a queued track; voting again changes the vote"""
    vote_service = VoteService(db)
    try:
        stored = vote_service.vote(user_id, queue_item_id, request.vote_type, session_id=session_id)
    except SessionEndedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not stored:
        raise HTTPException(status_code=404, detail=f"Queue item '{queue_item_id}' not found")

    item = stored.queue_item
    return VoteResponse(
        id=stored.id,
        queue_item_id=stored.queue_item_id,
        user_id=stored.user_id,
        vote_type=stored.vote_type,
        upvotes=item.upvotes,
        downvotes=item.downvotes,
        created_at=stored.created_at,
    )


@router.post("/{session_id}/skip", response_model=SessionResponse)
def skip_track(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Skip the current track and play the top voted pending one"""
    try:
        session = SessionService(db).skip_track(session_id, user_id)
    except SessionEndedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not session:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return session


@router.patch("/{session_id}/end", response_model=SessionResponse)
def end_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """End the session (host only)"""
    try:
        session = SessionService(db).end(session_id, user_id)
    except ForbiddenActionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except SessionEndedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not session:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return session


@router.delete("/{session_id}", status_code=204)
def delete_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a session with its queue (host only)"""
    try:
        deleted = SessionService(db).delete(session_id, user_id)
    except ForbiddenActionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return Response(status_code=204)
