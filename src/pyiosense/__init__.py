"""Python client library for the IOsense IoT platform.

This package provides an async client for device data, user profile, login
and insight endpoints, built around one retrying HTTP transport.

The library is organized into four layers:
1. **Composition Layer** (pyiosense.composer): URL template formatting and header merging
2. **API Layer** (pyiosense.api, pyiosense.resilience): Retrying HTTP communication
3. **Domain Layer** (pyiosense.devices, pyiosense.users, pyiosense.insights, pyiosense.auth)
4. **Client Layer** (pyiosense.client): One shared transport for every domain wrapper

Example:
    Basic usage:

    ```python
    from pyiosense import IosenseClient

    async with IosenseClient(backend_host="appserver.iosense.io", access_token=token) as client:
        devices = await client.devices.get_all_devices()

        data = await client.devices.get_data_by_time_range(
            "DEV12345",
            start_time="2024-01-01T00:00:00",
            end_time="2024-01-02T00:00:00",
        )
    ```

    Direct API access for custom endpoints:

    ```python
    async with IosenseClient(backend_host="appserver.iosense.io", access_token=token) as client:
        result = await client.api.get("{protocol}://{backend_url}/api/account/custom/{id}", path_params={"id": "42"})
    ```
"""

from __future__ import annotations

from pyiosense.api import IosenseAPI
from pyiosense.auth import login
from pyiosense.client import IosenseClient
from pyiosense.composer import create_headers, format_url
from pyiosense.devices import DeviceAccess
from pyiosense.exceptions import (
    AuthenticationError,
    DecodeError,
    HttpStatusError,
    InvalidParameterError,
    IosenseError,
    MalformedTemplateError,
    NetworkError,
    RequestCancelledError,
    RetriesExhaustedError,
)
from pyiosense.insights import InsightAccess
from pyiosense.models import ClientContext, LoginRequest, LoginResponse, RequestSpec
from pyiosense.resilience import RetryPolicy, retry_with_backoff
from pyiosense.users import UserAccess


__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "ClientContext",
    "DecodeError",
    "DeviceAccess",
    "HttpStatusError",
    "InsightAccess",
    "InvalidParameterError",
    "IosenseAPI",
    "IosenseClient",
    "IosenseError",
    "LoginRequest",
    "LoginResponse",
    "MalformedTemplateError",
    "NetworkError",
    "RequestCancelledError",
    "RequestSpec",
    "RetriesExhaustedError",
    "RetryPolicy",
    "UserAccess",
    "__version__",
    "create_headers",
    "format_url",
    "login",
    "retry_with_backoff",
]
