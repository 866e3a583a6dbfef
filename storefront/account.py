"""
Account — the logged-in user's profile.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storefront.api import ApiClient
from storefront.domain import Profile
from storefront.errors import ApiError, Text, text_for

logger = logging.getLogger(__name__)


class AccountService:
    __slots__ = ("_api",)

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def fetch_profile(self) -> Result[Profile, ApiError]:
        return await self._api.fetch_profile()

    async def update_profile(self, profile: Profile) -> Result[str, ApiError]:
        """Ok carries the confirmation to show."""
        match await self._api.update_profile(profile):
            case Ok(message):
                logger.info("Profile updated for %s", profile.email)
                return Ok(message or text_for(Text.PROFILE_UPDATED, self._api.settings.locale))
            case Error(err):
                logger.warning("Profile update for %s failed: %s", profile.email, err)
                return Error(err)


__all__ = ("AccountService",)
