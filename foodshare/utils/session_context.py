"""
Session Context

Per-request identity carrier. Wraps the signed-cookie session provided by
Starlette's SessionMiddleware and exposes the only transitions allowed on it:
- log_in: a credential check succeeded
- log_out: the user asked to end the session
- invalidate: the referenced account no longer exists
"""

import logging
from typing import Any, MutableMapping, Optional

from fastapi import Request

logger = logging.getLogger(__name__)

USER_ID_KEY = "user_id"


class SessionContext:
    """The authenticated user id (if any) attached to the current client session"""

    def __init__(self, store: MutableMapping[str, Any]):
        self._store = store

    @classmethod
    def from_request(cls, request: Request) -> "SessionContext":
        return cls(request.session)

    @property
    def user_id(self) -> Optional[int]:
        return self._store.get(USER_ID_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def log_in(self, user_id: int) -> None:
        self._store[USER_ID_KEY] = user_id

    def log_out(self) -> None:
        self._store.pop(USER_ID_KEY, None)

    def invalidate(self) -> None:
        logger.warning("Clearing session for unknown user id %s", self.user_id)
        self._store.pop(USER_ID_KEY, None)


def get_session_context(request: Request) -> SessionContext:
    """FastAPI dependency returning the session context of the current request"""
    return SessionContext.from_request(request)
