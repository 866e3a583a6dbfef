"""
Session — tokens, claims and the 401 guard.

    from storefront import session as S

    tokens = S.JsonFileTokenStore(Path("~/.storefront/session.json").expanduser())
    guard = S.SessionGuard(tokens, navigator)
"""

from __future__ import annotations

from storefront.session._store import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    TokenStore,
    MemoryTokenStore,
    JsonFileTokenStore,
    read_access_token,
    save_tokens,
    clear_tokens,
)
from storefront.session._jwt import (
    ROLE_CLAIM,
    Claims,
    decode_claims,
    role_from,
    user_from,
)
from storefront.session._guard import Routes, Navigator, SessionGuard

__all__ = (
    "ACCESS_TOKEN_KEY",
    "REFRESH_TOKEN_KEY",
    "TokenStore",
    "MemoryTokenStore",
    "JsonFileTokenStore",
    "read_access_token",
    "save_tokens",
    "clear_tokens",
    "ROLE_CLAIM",
    "Claims",
    "decode_claims",
    "role_from",
    "user_from",
    "Routes",
    "Navigator",
    "SessionGuard",
)
