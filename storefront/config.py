"""
Settings — immutable client configuration.

    settings = Settings.from_env()            # reads .env + environment
    settings = Settings(api_base_url="https://api.example.com")
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from dotenv import find_dotenv, load_dotenv

from storefront.errors import ConfigError, DEFAULT_LOCALE
from storefront.retry import RetryPolicy, FIXED_3X1S, backoff

ENV_PREFIX = "STOREFRONT_"


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Client configuration.

    request_timeout=None keeps the httpx default.
    """

    api_base_url: str
    locale: str = DEFAULT_LOCALE
    shipping_page_size: int = 10
    request_timeout: float | None = None
    cart_retry: RetryPolicy = FIXED_3X1S
    notify_retry: RetryPolicy = FIXED_3X1S

    def __post_init__(self) -> None:
        if not self.api_base_url:
            raise ConfigError("api_base_url", "must not be empty")
        if self.shipping_page_size < 1:
            raise ConfigError("shipping_page_size", "must be >= 1")

    @property
    def base_url(self) -> str:
        return self.api_base_url.rstrip("/")

    def with_retry(self, policy: RetryPolicy) -> Settings:
        """Same policy for cart fetch and admin notify."""
        return replace(self, cart_retry=policy, notify_retry=policy)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, *, dotenv: bool = True) -> Settings:
        """
        Build settings from STOREFRONT_* variables.

        STOREFRONT_API_BASE_URL is required. A .env file in the working
        directory is loaded first unless dotenv=False or env is given.
        """
        if env is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True))
            env = os.environ

        base_url = env.get(f"{ENV_PREFIX}API_BASE_URL", "").strip()
        if not base_url:
            raise ConfigError(f"{ENV_PREFIX}API_BASE_URL", "is required")

        policy = backoff(
            _at_least("RETRY_ATTEMPTS", _int(env, "RETRY_ATTEMPTS", 3), 1),
            _at_least("RETRY_DELAY", _float(env, "RETRY_DELAY", 1.0), 0.0),
            _at_least("RETRY_BACKOFF", _float(env, "RETRY_BACKOFF", 1.0), 1.0),
        )

        timeout_raw = env.get(f"{ENV_PREFIX}REQUEST_TIMEOUT")
        return cls(
            api_base_url=base_url,
            locale=env.get(f"{ENV_PREFIX}LOCALE", DEFAULT_LOCALE),
            shipping_page_size=_int(env, "SHIPPING_PAGE_SIZE", 10),
            request_timeout=_float(env, "REQUEST_TIMEOUT", 0.0) if timeout_raw else None,
            cart_retry=policy,
            notify_retry=policy,
        )


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name}", f"not an integer: {raw!r}") from e


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name}", f"not a number: {raw!r}") from e


def _at_least[N: (int, float)](name: str, value: N, minimum: N) -> N:
    if not value >= minimum:
        raise ConfigError(f"{ENV_PREFIX}{name}", f"must be >= {minimum}, got {value!r}")
    return value


__all__ = ("ENV_PREFIX", "Settings")
