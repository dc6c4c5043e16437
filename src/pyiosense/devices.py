"""Device data access for the IOsense platform.

DeviceAccess maps each device endpoint to one retrying request through a
shared IosenseAPI. Failures are logged and reported as None, so callers
only need to check for a missing result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pyiosense.composer import merge_headers
from pyiosense.const import (
    DEFAULT_CURSOR_LIMIT,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SENSOR,
    DEVICE_ALL_PAGINATED_URL,
    DEVICE_ALL_URL,
    DEVICE_BY_DEVID_URL,
    DEVICE_DATA_BY_STET_URL,
    DEVICE_DATA_BY_TIME_RANGE_CALIBRATION_URL,
    DEVICE_DATA_BY_TIME_RANGE_URL,
    DEVICE_DATA_COUNT_URL,
    DEVICE_DATA_URL,
    DEVICE_LAST_DATA_POINTS_URL,
    DEVICE_LAST_DP_URL,
    DEVICE_LIMITED_DATA_URL,
    DEVICE_LOAD_ENTITIES_GEN_BY_ID_URL,
    DEVICE_LOAD_ENTITIES_GEN_PAGINATED_URL,
    DEVICE_LOAD_ENTITIES_GEN_URL,
    DEVICE_MONTHLY_CONSUMPTION_URL,
)
from pyiosense.exceptions import IosenseError
from pyiosense.serializers import build_body, to_iso8601, to_unix_millis, to_unix_seconds


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pyiosense.api import IosenseAPI
    from pyiosense.models import HttpMethod
    from pyiosense.serializers import TimeValue

_LOGGER = logging.getLogger(__name__)

JSON_HEADERS: dict[str, str] = {"Content-Type": "application/json"}


class DeviceAccess:
    """Access to device listings, device data and load entities.

    Every method returns the decoded JSON response, or None when the request
    failed after all retries. Invalid time arguments raise
    InvalidParameterError before any request is made.

    Example:
        ```python
        async with IosenseClient(backend_host="appserver.iosense.io", access_token=token) as client:
            devices = await client.devices.get_all_devices()

            data = await client.devices.get_data_by_time_range(
                "DEV12345",
                start_time="2024-01-01T00:00:00",
                end_time="2024-01-02T00:00:00",
            )
        ```

    Attributes:
        DEFAULT_CURSOR_LIMIT: Page size callers use when walking cursor
            responses from ``get_data_by_st_et``.
    """

    DEFAULT_CURSOR_LIMIT = DEFAULT_CURSOR_LIMIT

    def __init__(self, api: IosenseAPI) -> None:
        """Initialize device access.

        Args:
            api: Shared IosenseAPI instance for HTTP communication.
        """
        self._api = api

    @property
    def timezone(self) -> str:
        """Timezone used to interpret naive time values."""
        return self._api.context.timezone

    async def _request(
        self,
        operation: str,
        method: HttpMethod,
        url_template: str,
        *,
        path_params: Mapping[str, Any] | None = None,
        body: Any = None,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Run one retrying request, translating failures into None."""
        headers = merge_headers(JSON_HEADERS if method != "GET" else {}, extra_headers)

        try:
            return await self._api.call(
                method,
                url_template,
                path_params=path_params,
                extra_headers=headers,
                json_data=body,
            )
        except IosenseError as err:
            _LOGGER.warning("%s failed: %s", operation, err)
            return None

    # -------------------------------------------------------------------------
    # Device listings
    # -------------------------------------------------------------------------

    async def get_all_devices(self, *, extra_headers: Mapping[str, str | None] | None = None) -> Any | None:
        """Get every device visible to the account."""
        return await self._request("get_all_devices", "GET", DEVICE_ALL_URL, extra_headers=extra_headers)

    async def get_all_devices_paginated(
        self,
        skip: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        *,
        search: Any = None,
        is_hidden: bool = False,
        order: str = "stared",
        sort: str = "AtoZ",
        filter: Any = None,  # noqa: A002 - matches the request field name
        extra_headers: Mapping[str, str | None] | None = None,
        **extra: Any,
    ) -> Any | None:
        """Get one page of devices.

        Args:
            skip: Page offset. Values below 1 are treated as 1.
            limit: Page size.
            search: Optional search payload.
            is_hidden: Whether to list hidden devices.
            order: Ordering key.
            sort: Sort direction.
            filter: Optional filter payload.
            extra_headers: Optional caller headers.
            **extra: Additional body fields.

        Returns:
            Decoded response, or None on failure.
        """
        body = build_body(
            {"isHidden": is_hidden, "order": order, "sort": sort, "search": search, "filter": filter},
            extra,
        )
        return await self._request(
            "get_all_devices_paginated",
            "PUT",
            DEVICE_ALL_PAGINATED_URL,
            path_params={"skip": max(1, skip), "limit": limit},
            body=body,
            extra_headers=extra_headers,
        )

    async def get_device_data(
        self,
        device_id: str,
        *,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Get device metadata by its database ID."""
        return await self._request(
            "get_device_data",
            "GET",
            DEVICE_DATA_URL,
            path_params={"id": device_id},
            extra_headers=extra_headers,
        )

    async def get_device_by_dev_id(
        self,
        dev_id: str,
        *,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Get device metadata by its device ID."""
        return await self._request(
            "get_device_by_dev_id",
            "GET",
            DEVICE_BY_DEVID_URL,
            path_params={"devID": dev_id},
            extra_headers=extra_headers,
        )

    # -------------------------------------------------------------------------
    # Device data
    # -------------------------------------------------------------------------

    async def get_last_data_points(self, *, extra_headers: Mapping[str, str | None] | None = None) -> Any | None:
        """Get the most recent data point of every device."""
        return await self._request(
            "get_last_data_points", "GET", DEVICE_LAST_DATA_POINTS_URL, extra_headers=extra_headers
        )

    async def get_last_dp(
        self,
        dev_id: str,
        sensors: list[str],
        *,
        extra_headers: Mapping[str, str | None] | None = None,
        **extra: Any,
    ) -> Any | None:
        """Get the last data point of selected sensors of one device.

        Args:
            dev_id: Device ID.
            sensors: Sensor IDs to include.
            extra_headers: Optional caller headers.
            **extra: Additional body fields.
        """
        body = build_body({"devID": dev_id, "sensors": sensors}, extra)
        return await self._request(
            "get_last_dp", "PUT", DEVICE_LAST_DP_URL, body=body, extra_headers=extra_headers
        )

    async def get_limited_data(
        self,
        dev_id: str,
        lim: int,
        sensor: str = DEFAULT_SENSOR,
        *,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Get the latest ``lim`` data points of a sensor."""
        return await self._request(
            "get_limited_data",
            "GET",
            DEVICE_LIMITED_DATA_URL,
            path_params={"devID": dev_id, "sensor": sensor, "lim": lim},
            extra_headers=extra_headers,
        )

    async def get_data_count(
        self,
        dev_id: str,
        start_time: TimeValue | None = None,
        end_time: TimeValue | None = None,
        sensor: str = DEFAULT_SENSOR,
        *,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Count data points of a sensor in a time window.

        Times are sent in milliseconds. A missing bound means now; numeric
        bounds must already be millisecond timestamps.

        Raises:
            InvalidParameterError: If a time bound is invalid.
        """
        s_time = to_unix_millis(start_time, self.timezone)
        e_time = to_unix_millis(end_time, self.timezone)
        return await self._request(
            "get_data_count",
            "GET",
            DEVICE_DATA_COUNT_URL,
            path_params={"devID": dev_id, "sensor": sensor, "sTime": s_time, "eTime": e_time},
            extra_headers=extra_headers,
        )

    async def get_monthly_consumption(
        self,
        device: str,
        sensor: str,
        end_time: TimeValue,
        months: int,
        *,
        extra_headers: Mapping[str, str | None] | None = None,
        **extra: Any,
    ) -> Any | None:
        """Get monthly consumption totals ending at ``end_time``.

        Args:
            device: Device ID.
            sensor: Sensor ID.
            end_time: End of the window; sent as an ISO-8601 string.
            months: Number of months to include.
            extra_headers: Optional caller headers.
            **extra: Additional body fields.
        """
        body = build_body(
            {
                "device": device,
                "sensor": sensor,
                "endTime": to_iso8601(end_time, self.timezone),
                "months": months,
            },
            extra,
        )
        return await self._request(
            "get_monthly_consumption",
            "PUT",
            DEVICE_MONTHLY_CONSUMPTION_URL,
            body=body,
            extra_headers=extra_headers,
        )

    async def get_data_by_time_range(
        self,
        dev_id: str,
        start_time: TimeValue,
        end_time: TimeValue,
        sensor: str = DEFAULT_SENSOR,
        down_sample: int = 1,
        *,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Get sensor data between two times, in epoch seconds."""
        s_time = to_unix_seconds(start_time, self.timezone)
        e_time = to_unix_seconds(end_time, self.timezone)
        return await self._request(
            "get_data_by_time_range",
            "GET",
            DEVICE_DATA_BY_TIME_RANGE_URL,
            path_params={
                "devID": dev_id,
                "sensor": sensor,
                "sTime": s_time,
                "eTime": e_time,
                "downSample": down_sample,
            },
            extra_headers=extra_headers,
        )

    async def get_data_by_time_range_with_calibration(
        self,
        dev_id: str,
        start_time: TimeValue,
        end_time: TimeValue,
        sensor: str = DEFAULT_SENSOR,
        calibration: bool = True,
        *,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Get sensor data between two times with optional calibration applied."""
        s_time = to_unix_seconds(start_time, self.timezone)
        e_time = to_unix_seconds(end_time, self.timezone)
        return await self._request(
            "get_data_by_time_range_with_calibration",
            "GET",
            DEVICE_DATA_BY_TIME_RANGE_CALIBRATION_URL,
            path_params={
                "devID": dev_id,
                "sensor": sensor,
                "sTime": s_time,
                "eTime": e_time,
                "calibration": calibration,
            },
            extra_headers=extra_headers,
        )

    async def get_data_by_st_et(
        self,
        dev_id: str,
        start_time: TimeValue,
        end_time: TimeValue,
        *,
        cursor: bool = False,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Get all sensor data between two times.

        Args:
            dev_id: Device ID.
            start_time: Window start.
            end_time: Window end.
            cursor: Whether the caller expects the cursor-shaped response.
                The request itself is identical; the server decides the shape.
            extra_headers: Optional caller headers.
        """
        s_time = to_unix_seconds(start_time, self.timezone)
        e_time = to_unix_seconds(end_time, self.timezone)
        _LOGGER.debug("Fetching %s data (cursor=%s)", dev_id, cursor)
        return await self._request(
            "get_data_by_st_et",
            "GET",
            DEVICE_DATA_BY_STET_URL,
            path_params={"devID": dev_id, "sTime": s_time, "eTime": e_time},
            extra_headers=extra_headers,
        )

    # -------------------------------------------------------------------------
    # Load entities
    # -------------------------------------------------------------------------

    async def load_entities_gen(self, *, extra_headers: Mapping[str, str | None] | None = None) -> Any | None:
        """Get every load entity of the account."""
        return await self._request(
            "load_entities_gen", "GET", DEVICE_LOAD_ENTITIES_GEN_URL, extra_headers=extra_headers
        )

    async def load_entities_gen_by_id(
        self,
        entity_id: str,
        *,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> Any | None:
        """Get one load entity by ID."""
        return await self._request(
            "load_entities_gen_by_id",
            "GET",
            DEVICE_LOAD_ENTITIES_GEN_BY_ID_URL,
            path_params={"id": entity_id},
            extra_headers=extra_headers,
        )

    async def load_entities_gen_paginated(
        self,
        page: int,
        limit: int,
        *,
        search: Mapping[str, Any] | None = None,
        archive: bool | None = None,
        order: str | None = None,
        sort: str | None = None,
        projection: str | None = None,
        device_projection: str | None = None,
        extra_headers: Mapping[str, str | None] | None = None,
        **extra: Any,
    ) -> Any | None:
        """Get one page of load entities.

        Args:
            page: Page number.
            limit: Page size.
            search: Optional search terms, e.g. {"name": ["cluster"], "tags": ["production"]}.
            archive: Whether to list archived entities.
            order: "increment" or "decrement".
            sort: "alphabetical", "timeUpdated" or "timeCreated".
            projection: Space-separated entity fields to return.
            device_projection: Space-separated device fields to return.
            extra_headers: Optional caller headers.
            **extra: Additional body fields.
        """
        body = build_body(
            {
                "search": search,
                "archive": archive,
                "order": order,
                "sort": sort,
                "projection": projection,
                "deviceProjection": device_projection,
            },
            extra,
        )
        return await self._request(
            "load_entities_gen_paginated",
            "PUT",
            DEVICE_LOAD_ENTITIES_GEN_PAGINATED_URL,
            path_params={"page": page, "limit": limit},
            body=body,
            extra_headers=extra_headers,
        )
