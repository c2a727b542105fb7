"""Room API endpoints"""
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel, Field

from app.api.deps import get_current_user_id
from app.database import get_db
from app.services.room_service import RoomService

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


class CreateRoomRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    is_private: bool = False


class RoomResponse(BaseModel):
    id: str
    name: str
    description: str | None
    is_private: bool
    created_by_id: str
    created_at: datetime | None

    class Config:
        from_attributes = True


class RoomDetailResponse(RoomResponse):
    member_count: int
    active_session_id: str | None = None


class RoomMemberResponse(BaseModel):
    user_id: str
    joined_at: datetime | None

    class Config:
        from_attributes = True


@router.post("", response_model=RoomResponse, status_code=201)
def create_room(
    request: CreateRoomRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a room; the caller becomes its first member"""
    return RoomService(db).create_room(
        user_id,
        request.name,
        description=request.description,
        is_private=request.is_private,
    )


@router.get("/{room_id}", response_model=RoomDetailResponse)
def get_room(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get a room with its member count and active DJ session"""
    room_service = RoomService(db)
    room = room_service.get_room(room_id)
    if not room:
        raise HTTPException(status_code=404, detail=f"Room '{room_id}' not found")
    if room.is_private and not room_service.is_member(room_id, user_id):
        raise HTTPException(status_code=403, detail="You do not have access to this room")

    active_session = room_service.get_active_session(room_id)
    return RoomDetailResponse(
        **RoomResponse.model_validate(room).model_dump(),
        member_count=len(room_service.get_members(room_id)),
        active_session_id=active_session.id if active_session else None,
    )


@router.get("/{room_id}/members", response_model=List[RoomMemberResponse])
def get_room_members(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List room members, oldest first"""
    room_service = RoomService(db)
    room = room_service.get_room(room_id)
    if not room:
        raise HTTPException(status_code=404, detail=f"Room '{room_id}' not found")
    if room.is_private and not room_service.is_member(room_id, user_id):
        raise HTTPException(status_code=403, detail="You do not have access to this room")
    return room_service.get_members(room_id)
