"""
Session guard — what happens when the server says 401.
"""

from __future__ import annotations

import logging
from typing import Protocol

from storefront.session._store import TokenStore, read_access_token, clear_tokens

logger = logging.getLogger(__name__)


class Routes:
    HOME = "/"
    LOGIN = "/login"
    ADMIN = "/admin/dashboard"


class Navigator(Protocol):
    """The UI's router, as far as this library is concerned."""

    def go(self, route: str, *, replace: bool = False) -> None: ...


class SessionGuard:
    """
    Clears the stored session and sends the user to login.

    expire() only acts while an access token is stored, so several
    in-flight calls that all see the same 401 navigate once.
    """

    __slots__ = ("_tokens", "_navigator")

    def __init__(self, tokens: TokenStore, navigator: Navigator) -> None:
        self._tokens = tokens
        self._navigator = navigator

    def expire(self) -> bool:
        """Returns True if this call cleared the session."""
        if read_access_token(self._tokens) is None:
            return False
        clear_tokens(self._tokens)
        logger.info("Session expired, redirecting to %s", Routes.LOGIN)
        self._navigator.go(Routes.LOGIN, replace=True)
        return True

    def require_login(self) -> None:
        """No session at all: go log in."""
        clear_tokens(self._tokens)
        self._navigator.go(Routes.LOGIN)


__all__ = ("Routes", "Navigator", "SessionGuard")
