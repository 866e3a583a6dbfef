"""
JWT claims — just enough decoding to derive who is logged in.

The signature is not verified; the server does that on every call.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from kungfu import Result, Ok, Error

from storefront.domain import User, UserRole
from storefront.errors import ParseError

ROLE_CLAIM = "http://schemas.microsoft.com/ws/2008/06/identity/claims/role"
DEFAULT_ROLE = "Customer"
DEFAULT_NAME = "User"


@dataclass(frozen=True, slots=True)
class Claims:
    subject: str
    email: str
    roles: tuple[str, ...]
    expires_at: datetime | None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now


def _b64url_decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def decode_claims(token: str) -> Result[Claims, ParseError]:
    parts = token.split(".")
    if len(parts) < 2:
        return Error(ParseError("token", "not a JWT"))
    try:
        payload = json.loads(_b64url_decode(parts[1]).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValueError) as e:
        return Error(ParseError("token", f"undecodable payload: {e}"))
    if not isinstance(payload, dict):
        return Error(ParseError("token", "payload is not an object"))

    raw_roles = payload.get(ROLE_CLAIM)
    if isinstance(raw_roles, list):
        roles = tuple(str(r) for r in raw_roles)
    else:
        roles = (str(raw_roles or DEFAULT_ROLE),)

    exp = payload.get("exp")
    expires_at = None
    if isinstance(exp, (int, float)) and not isinstance(exp, bool):
        try:
            expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            return Error(ParseError("token", f"exp out of range: {e}"))

    return Ok(Claims(
        subject=str(payload.get("sub") or ""),
        email=str(payload.get("email") or ""),
        roles=roles,
        expires_at=expires_at,
    ))


def role_from(roles: Iterable[str]) -> UserRole:
    """admin if any role is "admin" (any case), else user."""
    if any(r.lower() == "admin" for r in roles):
        return UserRole.ADMIN
    return UserRole.USER


def user_from(claims: Claims, *, roles: Iterable[str] | None = None, fallback_email: str = "") -> User:
    """
    Build the session user.

    roles overrides the token's role claim (login responses carry their own).
    Display name is the local part of the email.
    """
    email = claims.email or fallback_email
    name = email.split("@")[0] if email else DEFAULT_NAME
    return User(
        id=claims.subject,
        name=name or DEFAULT_NAME,
        email=email,
        role=role_from(claims.roles if roles is None else roles),
    )


__all__ = (
    "ROLE_CLAIM",
    "Claims",
    "decode_claims",
    "role_from",
    "user_from",
)
