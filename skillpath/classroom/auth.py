"""
Auth boundary - Resolve the current user once per operation.

The core never reads an ambient session; callers hand in an AuthContext and
operations call require_user() before touching storage.
"""

from typing import Optional, Protocol

from skillpath.errors import NotAuthenticated


class AuthContext(Protocol):
    def current_user(self) -> Optional[str]:
        ...


class StaticAuth:
    """AuthContext with a fixed user id (None means signed out)."""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id

    def current_user(self) -> Optional[str]:
        return self.user_id


def require_user(auth: AuthContext) -> str:
    """Return the current user id or raise NotAuthenticated."""
    user_id = auth.current_user()
    if not user_id:
        raise NotAuthenticated()
    return user_id
