"""Errors raised by the session, queue and vote services"""


class SessionServiceError(Exception):
    """Base class for service-level failures reported to the caller"""


class RoomNotFoundError(SessionServiceError, LookupError):
    """A referenced room does not exist"""


class ForbiddenActionError(SessionServiceError):
    """The caller lacks the relationship required for the action (e.g. not the host)"""


class ActiveSessionExistsError(SessionServiceError, ValueError):
    """The room already has an active DJ session"""


class SessionEndedError(SessionServiceError, ValueError):
    """The session has ended and no longer accepts changes"""
