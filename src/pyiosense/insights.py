"""User insight management for the IOsense platform.

Unlike device and user access, insight calls propagate failures: a call
either returns the decoded response or raises RetriesExhaustedError,
RequestCancelledError or MalformedTemplateError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pyiosense.composer import merge_headers
from pyiosense.const import (
    INSIGHT_ADD_URL,
    INSIGHT_RESULT_FETCH_PAGINATED_URL,
    INSIGHT_SOURCE_URL,
    INSIGHT_UPDATE_SINGLE_URL,
    INSIGHT_USER_FETCH_PAGINATED_URL,
)
from pyiosense.serializers import build_body


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pyiosense.api import IosenseAPI


class InsightAccess:
    """Fetch, update and create user insights.

    Each method accepts ``on_prem`` to override the client's transport
    selection for that call only.

    Example:
        ```python
        async with IosenseClient(backend_host="appserver.iosense.io", access_token=token) as client:
            insights = await client.insights.fetch_user_insights(pagination={"page": 1, "count": 10})

            result = await client.insights.fetch_insight_result(
                "INS_123",
                filters={"startDate": "2024-01-01"},
            )
        ```
    """

    def __init__(self, api: IosenseAPI) -> None:
        """Initialize insight access.

        Args:
            api: Shared IosenseAPI instance for HTTP communication.
        """
        self._api = api

    @staticmethod
    def _headers(extra_headers: Mapping[str, str | None] | None) -> dict[str, str | None]:
        return merge_headers({"Content-Type": "application/json"}, extra_headers)

    async def fetch_user_insights(
        self,
        *,
        on_prem: bool | None = None,
        extra_headers: Mapping[str, str | None] | None = None,
        **payload: Any,
    ) -> Any:
        """Fetch a page of the user's insights.

        Args:
            on_prem: Optional per-call transport override.
            extra_headers: Optional caller headers.
            **payload: Request body fields, sent as given.
        """
        return await self._api.put(
            INSIGHT_USER_FETCH_PAGINATED_URL,
            dict(payload),
            extra_headers=self._headers(extra_headers),
            on_prem=on_prem,
        )

    async def fetch_source_insight(
        self,
        insight_id: str,
        *,
        projection: Any = None,
        populate: Any = None,
        on_prem: bool | None = None,
        extra_headers: Mapping[str, str | None] | None = None,
        **extra: Any,
    ) -> Any:
        """Fetch the source definition of an insight."""
        return await self._api.put(
            INSIGHT_SOURCE_URL,
            build_body({"projection": projection, "populate": populate}, extra),
            path_params={"insightID": insight_id},
            extra_headers=self._headers(extra_headers),
            on_prem=on_prem,
        )

    async def fetch_insight_result(
        self,
        insight_id: str,
        *,
        filters: Any = None,
        projection: Any = None,
        pagination: Any = None,
        on_prem: bool | None = None,
        extra_headers: Mapping[str, str | None] | None = None,
        **extra: Any,
    ) -> Any:
        """Fetch a page of results produced by an insight.

        Args:
            insight_id: Insight ID. Percent-encoded into the URL.
            filters: Optional result filters.
            projection: Optional field projection.
            pagination: Optional pagination settings.
            on_prem: Optional per-call transport override.
            extra_headers: Optional caller headers.
            **extra: Additional body fields.
        """
        return await self._api.put(
            INSIGHT_RESULT_FETCH_PAGINATED_URL,
            build_body({"filters": filters, "projection": projection, "pagination": pagination}, extra),
            path_params={"insightID": insight_id},
            extra_headers=self._headers(extra_headers),
            on_prem=on_prem,
        )

    async def update_single_user_insight(
        self,
        insight_id: str,
        update: Mapping[str, Any],
        *,
        user: Any = None,
        on_prem: bool | None = None,
        extra_headers: Mapping[str, str | None] | None = None,
        **extra: Any,
    ) -> Any:
        """Apply an update to one of the user's insights."""
        body = build_body({"insightID": insight_id, "update": dict(update), "user": user}, extra)
        return await self._api.put(
            INSIGHT_UPDATE_SINGLE_URL,
            body,
            extra_headers=self._headers(extra_headers),
            on_prem=on_prem,
        )

    async def add_user_insight(
        self,
        insight_id: str,
        insight_name: str,
        *,
        note: str | None = None,
        user_tags: list[str] | None = None,
        starred: bool | None = None,
        hidden: bool | None = None,
        icon: str | None = None,
        organisations: list[str] | None = None,
        user: Any = None,
        on_prem: bool | None = None,
        extra_headers: Mapping[str, str | None] | None = None,
        **extra: Any,
    ) -> Any:
        """Add an insight to the user's collection.

        Args:
            insight_id: Insight ID.
            insight_name: Display name.
            note: Optional note.
            user_tags: Optional tags.
            starred: Optional starred flag.
            hidden: Optional hidden flag.
            icon: Optional icon name.
            organisations: Optional organisation IDs to share with.
            user: Optional user payload.
            on_prem: Optional per-call transport override.
            extra_headers: Optional caller headers.
            **extra: Additional body fields.

        Raises:
            RetriesExhaustedError: If every attempt failed.
        """
        body = build_body(
            {
                "insightID": insight_id,
                "insightName": insight_name,
                "note": note,
                "userTags": user_tags,
                "starred": starred,
                "hidden": hidden,
                "icon": icon,
                "organisations": organisations,
                "user": user,
            },
            extra,
        )
        return await self._api.post(
            INSIGHT_ADD_URL,
            body,
            extra_headers=self._headers(extra_headers),
            on_prem=on_prem,
        )
