"""
Auth service — login, registration, session restore and logout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from kungfu import Result, Ok, Error

from storefront.api import ApiClient
from storefront.cart import CartStore
from storefront.domain import Registration, User, UserRole
from storefront.errors import ApiError
from storefront.session import (
    Claims,
    Routes,
    TokenStore,
    clear_tokens,
    decode_claims,
    read_access_token,
    role_from,
    save_tokens,
    user_from,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoginOutcome:
    user: User
    redirect_to: str


def redirect_for(user: User) -> str:
    return Routes.ADMIN if user.is_admin else Routes.HOME


class AuthService:
    __slots__ = ("_api", "_tokens")

    def __init__(self, api: ApiClient, tokens: TokenStore) -> None:
        self._api = api
        self._tokens = tokens

    async def login(self, email: str, password: str) -> Result[LoginOutcome, ApiError]:
        """
        Store the tokens and derive the user.

        The response's roles list decides the role; the token's claims fill
        in id and email.
        """
        match await self._api.login(email, password):
            case Error(err):
                logger.warning("Login failed for %s: %s", email, err)
                return Error(err)
            case Ok(tokens):
                pass

        save_tokens(self._tokens, tokens.access_token, tokens.refresh_token)
        match decode_claims(tokens.access_token):
            case Ok(claims):
                pass
            case Error(pe):
                logger.warning("Access token claims unreadable: %s", pe)
                claims = Claims(subject="", email=email, roles=(), expires_at=None)

        user = user_from(claims, roles=tokens.roles or claims.roles, fallback_email=email)
        logger.info("Logged in %s as %s", user.email, user.role.value)
        return Ok(LoginOutcome(user=user, redirect_to=redirect_for(user)))

    async def register(self, registration: Registration) -> Result[None, ApiError]:
        return await self._api.register(registration)

    async def forgot_password(self, email: str) -> Result[None, ApiError]:
        return await self._api.forgot_password(email)

    async def reset_password(self, email: str, token: str, new_password: str) -> Result[None, ApiError]:
        return await self._api.reset_password(email, token, new_password)

    def restore(self, now: datetime | None = None) -> User | None:
        """The stored session's user; an unreadable or expired token is removed."""
        token = read_access_token(self._tokens)
        if token is None:
            return None
        match decode_claims(token):
            case Ok(claims) if not claims.is_expired(now):
                return user_from(claims)
            case Ok(_):
                logger.info("Stored session expired")
            case Error(pe):
                logger.warning("Stored token unreadable: %s", pe)
        clear_tokens(self._tokens)
        return None

    def current_role(self) -> UserRole | None:
        token = read_access_token(self._tokens)
        if token is None:
            return None
        match decode_claims(token):
            case Ok(claims):
                return role_from(claims.roles)
            case Error(_):
                return None

    def logout(self, cart: CartStore) -> None:
        clear_tokens(self._tokens)
        cart.clear()
        logger.info("Logged out")


__all__ = ("LoginOutcome", "redirect_for", "AuthService")
