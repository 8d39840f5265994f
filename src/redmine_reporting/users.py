from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import httpx

from .config import Settings, parse_user_ids
from .errors import ConfigurationError
from .parse import UserProfile
from .pool import run_unbounded
from .redmine_api import RedmineClient

log = logging.getLogger(__name__)


class UserDirectoryFetcher:
    def __init__(self, api: RedmineClient) -> None:
        self.api = api

    async def _profile(self, user_id: str) -> Optional[UserProfile]:
        user = await self.api.get_user(user_id)
        if not user:
            return None
        return UserProfile.from_api(user)

    async def fetch_profiles(self, user_ids: str | Iterable[str | int]) -> List[UserProfile]:
        """
        Fetch every listed user at once and return the ones that resolved.

        Unknown users and failed lookups are both simply absent from the
        result; only the log tells them apart.
        """
        ids = parse_user_ids(user_ids)
        if not ids:
            raise ConfigurationError("No user ids given")

        outcomes = await run_unbounded(ids, self._profile)

        profiles: List[UserProfile] = []
        for outcome in outcomes:
            if not outcome.ok:
                log.warning(
                    "Failed to fetch user",
                    extra={"user_id": outcome.item, "error": str(outcome.error)},
                )
            elif outcome.value is None:
                log.info("User not found", extra={"user_id": outcome.item})
            else:
                profiles.append(outcome.value)
        return profiles


async def fetch_staff_profiles(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> List[UserProfile]:
    if not settings.staff_user_ids:
        raise ConfigurationError("STAFF_USER_IDS is not set")
    async with RedmineClient(settings, transport=transport) as api:
        return await UserDirectoryFetcher(api).fetch_profiles(settings.staff_user_ids)


__all__ = ["UserDirectoryFetcher", "fetch_staff_profiles"]
