"""Authenticated session state for one browser session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from .models import User

if TYPE_CHECKING:
    from .api_client import TaskboardClient

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Current user and tokens.

    Created empty on app start, filled by login or ``restore_session`` and
    emptied by ``clear`` (logout or failed token refresh).
    """

    user: Optional[User] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def has_token(self) -> bool:
        return bool(self.access_token)

    def set_tokens(self, access_token: Optional[str], refresh_token: Optional[str] = None) -> None:
        self.access_token = access_token or None
        if refresh_token is not None:
            self.refresh_token = refresh_token or None

    def set_user(self, user: Any) -> None:
        if user is None or isinstance(user, User):
            self.user = user
        else:
            self.user = User.from_dict(user)

    def clear(self) -> None:
        self.user = None
        self.access_token = None
        self.refresh_token = None


def restore_session(client: "TaskboardClient") -> Optional[User]:
    """Load the profile for a session that holds a token but no user yet.

    A failing profile call logs the session out.
    """
    session = client.session
    if session.user is not None or not session.has_token:
        return session.user
    resp = client.get_profile()
    user = resp.entity("user") if resp.success else None
    if user is None:
        logger.info("Session restore failed (%s); logging out", resp.error or resp.status_code)
        client.logout()
        return None
    session.set_user(user)
    return session.user
