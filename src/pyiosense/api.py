"""Low-level retrying HTTP client for IOsense REST endpoints.

This module provides the single transport every domain wrapper shares.
A logical call composes its URL and headers, then dispatches with bounded
retries and capped exponential backoff. The caller receives the decoded
JSON body or exactly one terminal error.
"""

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from aiohttp import ClientError, ClientSession, ClientTimeout

from pyiosense.composer import create_headers, format_url
from pyiosense.const import DEFAULT_TIMEOUT
from pyiosense.exceptions import (
    DecodeError,
    HttpStatusError,
    NetworkError,
    format_error_message,
)
from pyiosense.models import RequestSpec
from pyiosense.resilience import RetryPolicy, retry_with_backoff


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping
    from types import TracebackType

    from pyiosense.models import ClientContext, HttpMethod

_LOGGER = logging.getLogger(__name__)

# Failures that are retried within a logical call
RETRYABLE_ERRORS: tuple[type[Exception], ...] = (NetworkError, HttpStatusError, DecodeError)


class IosenseAPI:
    """Retrying HTTP client for the IOsense platform.

    Every request goes through ``execute``: the URL template is formatted,
    the bearer header merged with caller overrides, and the request is
    dispatched up to ``retry_policy.max_attempts`` times. Network errors,
    non-2xx responses and undecodable bodies are all retried.

    Example:
        ```python
        from pyiosense.api import IosenseAPI
        from pyiosense.models import ClientContext

        context = ClientContext(backend_host="appserver.iosense.io", access_token="token")

        async with IosenseAPI(context=context) as api:
            devices = await api.get("{protocol}://{backend_url}/api/account/devices")

            data = await api.get(
                "{protocol}://{backend_url}/api/account/devices/getDeviceData/{id}",
                path_params={"id": "DEV12345"},
            )
        ```

    Attributes:
        context: Immutable connection settings.
        retry_policy: Retry configuration shared by all calls of this client.
    """

    def __init__(
        self,
        *,
        context: ClientContext,
        session: ClientSession | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the API client.

        Args:
            context: Connection settings (host, token, transport, timezone).
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            retry_policy: Optional retry configuration. Defaults to 15 attempts
                with 2s base delay capped at 4s.
            timeout: Total timeout in seconds for a single attempt.
            sleep: Coroutine function used for backoff delays.
        """
        self._context = context
        self._session = session
        self._owns_session = session is None
        self._retry_policy = retry_policy or RetryPolicy()
        self._timeout = timeout
        self._sleep = sleep

    @property
    def context(self) -> ClientContext:
        """Get the connection settings."""
        return self._context

    @property
    def retry_policy(self) -> RetryPolicy:
        """Get the retry configuration."""
        return self._retry_policy

    @property
    def session(self) -> ClientSession | None:
        """Get the underlying aiohttp session, if any."""
        return self._session

    async def __aenter__(self) -> IosenseAPI:
        """Enter the context manager, creating a session if needed.

        Returns:
            Self for use in async with statements.
        """
        if self._session is None:
            self._session = ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager.

        Closes session if it was created by this client.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        await self.close()

    async def close(self) -> None:
        """Close the session if this client owns it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------

    def format_url(
        self,
        template: str,
        path_params: Mapping[str, Any] | None = None,
        *,
        on_prem: bool | None = None,
    ) -> str:
        """Format a URL template against this client's context.

        Raises:
            MalformedTemplateError: If a placeholder has no substitution.
        """
        return format_url(template, self._context, path_params, on_prem=on_prem)

    def create_headers(self, extra_headers: Mapping[str, str | None] | None = None) -> dict[str, str]:
        """Build request headers with this client's bearer token."""
        return create_headers(self._context, extra_headers)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _require_session(self) -> ClientSession:
        """Return the active session.

        Raises:
            RuntimeError: If session is not initialized or is closed.
        """
        if self._session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        if self._session.closed:
            msg = "Session is closed. Cannot make request."
            raise RuntimeError(msg)

        return self._session

    async def send(
        self,
        method: HttpMethod,
        url: str,
        headers: Mapping[str, str],
        body: Any = None,
    ) -> Any:
        """Perform exactly one HTTP exchange against a composed URL.

        Args:
            method: HTTP verb.
            url: Concrete URL.
            headers: Final request headers.
            body: Optional JSON body.

        Returns:
            Decoded JSON body. An empty 2xx body decodes to None.

        Raises:
            RuntimeError: If session is not initialized or is closed.
            NetworkError: If no response was received.
            HttpStatusError: If the response status is not 2xx.
            DecodeError: If a 2xx body is not valid JSON.
        """
        session = self._require_session()
        timeout = ClientTimeout(total=self._timeout)

        try:
            async with session.request(
                method,
                url,
                json=body,
                headers=dict(headers),
                timeout=timeout,
            ) as response:
                if not HTTPStatus.OK <= response.status < HTTPStatus.MULTIPLE_CHOICES:
                    text = await response.text(errors="replace")
                    raise HttpStatusError(
                        url=url,
                        status=response.status,
                        body=text,
                        server=response.headers.get("Server"),
                    )

                text = await response.text(errors="replace")
                try:
                    return await response.json(content_type=None)
                except ValueError as exc:
                    msg = f"Response from {url} is not valid JSON (HTTP {response.status})"
                    raise DecodeError(msg, url=url, status=response.status, body=text) from exc

        except (TimeoutError, ClientError) as exc:
            _LOGGER.debug("No response from %s: %r", url, exc)
            raise NetworkError(format_error_message(url), url=url) from exc

    async def dispatch(self, spec: RequestSpec) -> Any:
        """Compose and send a request once, without retries.

        Raises:
            MalformedTemplateError: If the URL template is incomplete.
            NetworkError: If no response was received.
            HttpStatusError: If the response status is not 2xx.
            DecodeError: If a 2xx body is not valid JSON.
        """
        url = self.format_url(spec.url_template, spec.path_params, on_prem=spec.on_prem)
        headers = self.create_headers(spec.headers)
        _LOGGER.debug("%s %s", spec.method, url)
        return await self.send(spec.method, url, headers, spec.body)

    async def execute(
        self,
        spec: RequestSpec,
        *,
        cancel_event: asyncio.Event | None = None,
        deadline: float | None = None,
    ) -> Any:
        """Execute one logical call with retries.

        The URL and headers are composed once, before the first attempt, so a
        malformed template fails immediately without any dispatch.

        Args:
            spec: Request description.
            cancel_event: Optional event that aborts the call when set.
            deadline: Optional limit in seconds for the whole call, retries included.

        Returns:
            Decoded JSON body of the first successful attempt.

        Raises:
            MalformedTemplateError: If the URL template is incomplete.
            RetriesExhaustedError: If every attempt failed.
            RequestCancelledError: If cancelled or the deadline elapsed.
        """
        url = self.format_url(spec.url_template, spec.path_params, on_prem=spec.on_prem)
        headers = self.create_headers(spec.headers)
        description = f"{spec.method} {url}"

        async def _attempt() -> Any:
            return await self.send(spec.method, url, headers, spec.body)

        _LOGGER.debug("Executing %s", description)

        return await retry_with_backoff(
            _attempt,
            policy=self._retry_policy,
            retryable_exceptions=RETRYABLE_ERRORS,
            cancel_event=cancel_event,
            deadline=deadline,
            sleep=self._sleep,
            description=description,
        )

    async def call(
        self,
        method: HttpMethod,
        url_template: str,
        *,
        path_params: Mapping[str, Any] | None = None,
        extra_headers: Mapping[str, str | None] | None = None,
        json_data: Any = None,
        on_prem: bool | None = None,
        cancel_event: asyncio.Event | None = None,
        deadline: float | None = None,
    ) -> Any:
        """Make a retrying request. Identical for GET, PUT and POST.

        Args:
            method: HTTP verb.
            url_template: URL template with placeholders.
            path_params: Values for non-host placeholders.
            extra_headers: Caller headers overlaid on the bearer header.
            json_data: Optional JSON body.
            on_prem: Optional per-call transport override.
            cancel_event: Optional event that aborts the call when set.
            deadline: Optional limit in seconds for the whole call.

        Returns:
            Decoded JSON body.
        """
        spec = RequestSpec(
            method=method,
            url_template=url_template,
            path_params=dict(path_params or {}),
            headers=dict(extra_headers or {}),
            body=json_data,
            on_prem=on_prem,
        )
        return await self.execute(spec, cancel_event=cancel_event, deadline=deadline)

    async def get(self, url_template: str, **kwargs: Any) -> Any:
        """Make a retrying GET request."""
        return await self.call("GET", url_template, **kwargs)

    async def put(self, url_template: str, json_data: Any = None, **kwargs: Any) -> Any:
        """Make a retrying PUT request."""
        return await self.call("PUT", url_template, json_data=json_data, **kwargs)

    async def post(self, url_template: str, json_data: Any = None, **kwargs: Any) -> Any:
        """Make a retrying POST request."""
        return await self.call("POST", url_template, json_data=json_data, **kwargs)
