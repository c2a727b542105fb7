"""Shared API dependencies"""
from fastapi import HTTPException, Request

from app.config import settings


def get_current_user_id(request: Request) -> str:
    """
    Resolve the calling user from the identity header set by the auth gateway.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    user_id = request.headers.get(settings.user_id_header)
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=401, detail="Missing caller identity")
    return user_id.strip()
