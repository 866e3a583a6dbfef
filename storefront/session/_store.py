"""
Token store — the local key-value store that holds session tokens.

Single writer, many readers, all on one event loop: no locking.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"

# Values a careless writer may have stored instead of removing the key
_BLANK_TOKENS = frozenset({"", "null", "undefined"})


class TokenStore(Protocol):
    """
    Key-value protocol.

    Example — a keyring-backed implementation:

        class KeyringStore:
            def get(self, key: str) -> str | None:
                return keyring.get_password("storefront", key)

            def set(self, key: str, value: str) -> None:
                keyring.set_password("storefront", key, value)

            def remove(self, key: str) -> None:
                with suppress(keyring.errors.PasswordDeleteError):
                    keyring.delete_password("storefront", key)
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class MemoryTokenStore:
    _data: dict[str, str] = field(default_factory=dict[str, str])

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


# ═══════════════════════════════════════════════════════════════════════════════
# JSON File Store
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class JsonFileTokenStore:
    """
    Tokens persisted in one JSON object on disk.

    The file is re-read on every get so separate processes see each
    other's logins and logouts. A corrupt file reads as empty.
    """

    path: Path

    def _load(self) -> dict[str, str]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Token file %s unreadable, treating as empty: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def read_access_token(store: TokenStore) -> str | None:
    """The access token, or None when missing or blank."""
    token = store.get(ACCESS_TOKEN_KEY)
    if token is None or token.strip() in _BLANK_TOKENS:
        return None
    return token


def save_tokens(store: TokenStore, access_token: str, refresh_token: str) -> None:
    store.set(ACCESS_TOKEN_KEY, access_token)
    store.set(REFRESH_TOKEN_KEY, refresh_token)


def clear_tokens(store: TokenStore) -> None:
    store.remove(ACCESS_TOKEN_KEY)
    store.remove(REFRESH_TOKEN_KEY)


__all__ = (
    "ACCESS_TOKEN_KEY",
    "REFRESH_TOKEN_KEY",
    "TokenStore",
    "MemoryTokenStore",
    "JsonFileTokenStore",
    "read_access_token",
    "save_tokens",
    "clear_tokens",
)
