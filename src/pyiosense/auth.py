"""Login against the IOsense platform."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import TYPE_CHECKING

from pyiosense.const import USER_LOGIN_URL
from pyiosense.exceptions import AuthenticationError, DecodeError, HttpStatusError
from pyiosense.models import RequestSpec
from pyiosense.serializers import build_body, deserialize_login_response


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pyiosense.api import IosenseAPI
    from pyiosense.models import LoginRequest, LoginResponse

_LOGGER = logging.getLogger(__name__)


async def login(
    api: IosenseAPI,
    request: LoginRequest,
    *,
    organisation: str,
    origin: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
    extra_headers: Mapping[str, str | None] | None = None,
) -> LoginResponse:
    """Exchange credentials for an access token.

    This makes exactly one POST to /api/login. It is never retried and no
    bearer token is sent.

    Args:
        api: IosenseAPI whose context supplies host and transport.
        request: Login credentials.
        organisation: Organisation URL the account belongs to.
        origin: Origin header value.
        ip_address: Optional client IP forwarded as ``x-real-ip``.
        user_agent: Optional ``user-agent`` header.
        extra_headers: Optional caller headers.

    Returns:
        LoginResponse with the access token in ``authorization``.

    Raises:
        AuthenticationError: If the credentials are rejected, the server
            answers with a non-2xx status, or the response is unusable.
        NetworkError: If no response was received.

    Example:
        ```python
        async with IosenseAPI(context=ClientContext(backend_host=host, access_token="")) as api:
            response = await login(
                api,
                LoginRequest(username="user@example.com", password="secret"),
                organisation="https://iosense.io",
                origin="https://iosense.io",
            )
            token = response.authorization
        ```
    """
    headers: dict[str, str | None] = {
        "Authorization": None,
        "Content-Type": "application/json",
        "organisation": organisation,
        "origin": origin,
        "x-real-ip": ip_address,
        "user-agent": user_agent,
    }
    headers.update(extra_headers or {})

    spec = RequestSpec(
        method="POST",
        url_template=USER_LOGIN_URL,
        headers=headers,
        body=build_body({"username": request.username, "password": request.password, "fcmToken": request.fcm_token}),
    )

    _LOGGER.debug("Logging in as %s", request.username)

    try:
        data = await api.dispatch(spec)
    except HttpStatusError as err:
        if err.status in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
            msg = f"Invalid credentials for {request.username} (HTTP {err.status})"
        else:
            msg = f"Login failed with HTTP {err.status}: {err.body}"
        raise AuthenticationError(msg, status=err.status) from err
    except DecodeError as err:
        msg = "Login response is not valid JSON"
        raise AuthenticationError(msg, status=err.status) from err

    if not isinstance(data, dict):
        msg = "Login response is not a JSON object"
        raise AuthenticationError(msg)

    response = deserialize_login_response(data)

    if not response.success:
        msg = f"Login rejected for {request.username}: {response.errors}"
        raise AuthenticationError(msg)

    _LOGGER.debug("Logged in as %s", request.username)
    return response
