"""Test helpers shared across modules"""

HOST = "user-host"


def auth(user_id: str) -> dict:
    """Identity header for a caller"""
    return {"X-User-Id": user_id}


def track(title: str, **extra) -> dict:
    """Track metadata as a client would send it"""
    return {"platform": "spotify", "title": title, "artist": "Test Artist", **extra}
