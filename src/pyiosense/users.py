"""User profile access for the IOsense platform."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pyiosense.const import USER_DETAILS_URL, USER_ENTITIES_URL, USER_ENTITY_FETCH_URL, USER_QUOTA_URL
from pyiosense.exceptions import IosenseError


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pyiosense.api import IosenseAPI

_LOGGER = logging.getLogger(__name__)


class UserAccess:
    """Read-only access to the current user's profile.

    Every method returns the decoded JSON response, or None when the request
    failed after all retries.
    """

    def __init__(self, api: IosenseAPI) -> None:
        """Initialize user access.

        Args:
            api: Shared IosenseAPI instance for HTTP communication.
        """
        self._api = api

    async def _get(
        self,
        operation: str,
        url_template: str,
        extra_headers: Mapping[str, str | None] | None,
    ) -> Any | None:
        try:
            return await self._api.get(url_template, extra_headers=extra_headers)
        except IosenseError as err:
            _LOGGER.warning("%s failed: %s", operation, err)
            return None

    async def get_user_details(self, *, extra_headers: Mapping[str, str | None] | None = None) -> Any | None:
        """Get the user's profile details."""
        return await self._get("get_user_details", USER_DETAILS_URL, extra_headers)

    async def get_user_quota(self, *, extra_headers: Mapping[str, str | None] | None = None) -> Any | None:
        """Get the user's usage quota."""
        return await self._get("get_user_quota", USER_QUOTA_URL, extra_headers)

    async def get_user_entities(self, *, extra_headers: Mapping[str, str | None] | None = None) -> Any | None:
        """Get the entities the user has access to."""
        return await self._get("get_user_entities", USER_ENTITIES_URL, extra_headers)

    async def get_user_entity_fetch(self, *, extra_headers: Mapping[str, str | None] | None = None) -> Any | None:
        """Get the user's entity records."""
        return await self._get("get_user_entity_fetch", USER_ENTITY_FETCH_URL, extra_headers)
