"""High-level client for the IOsense platform.

This module ties the domain wrappers together around one shared
IosenseAPI, so every call of a client reuses the same session, context and
retry policy.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiohttp import ClientSession  # noqa: TC002 - Used at runtime for type hints

from pyiosense.api import IosenseAPI
from pyiosense.auth import login
from pyiosense.const import DEFAULT_TIMEOUT, DEFAULT_TIMEZONE
from pyiosense.devices import DeviceAccess
from pyiosense.insights import InsightAccess
from pyiosense.models import ClientContext, LoginRequest
from pyiosense.users import UserAccess


if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from pyiosense.models import LoginResponse
    from pyiosense.resilience import RetryPolicy

_LOGGER = logging.getLogger(__name__)


class IosenseClient:
    """Client for device data, user profile and insight endpoints.

    Example:
        Basic usage with automatic session management:

        ```python
        from pyiosense import IosenseClient

        async with IosenseClient(backend_host="appserver.iosense.io", access_token=token) as client:
            devices = await client.devices.get_all_devices()
            details = await client.users.get_user_details()
        ```

        Session injection with a custom retry policy:

        ```python
        from aiohttp import ClientSession
        from pyiosense import IosenseClient, RetryPolicy

        async with ClientSession() as session:
            client = IosenseClient(
                backend_host="iosense.internal:8080",
                access_token=token,
                on_prem=True,
                session=session,
                retry_policy=RetryPolicy(max_attempts=3, base_delay=0.5, max_delay=2.0),
            )
            async with client:
                insights = await client.insights.fetch_user_insights()
        ```

    Attributes:
        api: Shared low-level IosenseAPI.
        devices: Device data access.
        users: User profile access.
        insights: Insight management.
    """

    def __init__(
        self,
        backend_host: str,
        access_token: str,
        *,
        on_prem: bool = False,
        timezone: str = DEFAULT_TIMEZONE,
        session: ClientSession | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the IOsense client.

        Args:
            backend_host: Backend server host, e.g. "appserver.iosense.io".
            access_token: Bearer token for API requests.
            on_prem: If True, use plain http instead of https.
            timezone: IANA timezone used to interpret naive time values.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            retry_policy: Optional retry configuration shared by every call.
            timeout: Total timeout in seconds for a single attempt.
        """
        context = ClientContext(
            backend_host=backend_host,
            access_token=access_token,
            on_prem=on_prem,
            timezone=timezone,
        )
        self._api = IosenseAPI(context=context, session=session, retry_policy=retry_policy, timeout=timeout)
        self._devices = DeviceAccess(self._api)
        self._users = UserAccess(self._api)
        self._insights = InsightAccess(self._api)

    @property
    def api(self) -> IosenseAPI:
        """Get the underlying API client for custom requests."""
        return self._api

    @property
    def devices(self) -> DeviceAccess:
        """Get device data access."""
        return self._devices

    @property
    def users(self) -> UserAccess:
        """Get user profile access."""
        return self._users

    @property
    def insights(self) -> InsightAccess:
        """Get insight management."""
        return self._insights

    async def __aenter__(self) -> IosenseClient:
        """Enter the context manager, creating a session if needed."""
        await self._api.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager and close an owned session."""
        await self._api.__aexit__(exc_type, exc_val, exc_tb)

    async def login(
        self,
        username: str,
        password: str,
        *,
        organisation: str,
        origin: str,
        fcm_token: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        extra_headers: Mapping[str, str | None] | None = None,
    ) -> LoginResponse:
        """Log in against this client's backend.

        The client keeps using its original access token; build a new client
        with ``response.authorization`` to act as the logged-in user.

        Raises:
            AuthenticationError: If the login is rejected.
            NetworkError: If no response was received.
        """
        _LOGGER.debug("Login requested for %s", username)
        return await login(
            self._api,
            LoginRequest(username=username, password=password, fcm_token=fcm_token),
            organisation=organisation,
            origin=origin,
            ip_address=ip_address,
            user_agent=user_agent,
            extra_headers=extra_headers,
        )
