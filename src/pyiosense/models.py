"""Data models for IOsense API requests and responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


__all__ = [
    "ClientContext",
    "HttpMethod",
    "LoginRequest",
    "LoginResponse",
    "RequestSpec",
]

HttpMethod = Literal["GET", "PUT", "POST"]


@dataclass(frozen=True)
class ClientContext:
    """Connection settings owned by one client instance.

    Attributes:
        backend_host: Backend server host (e.g., "appserver.iosense.io").
        access_token: Bearer token sent in the Authorization header.
        on_prem: If True, requests use plain http; otherwise https.
        timezone: IANA timezone used to interpret naive timestamps.
    """

    backend_host: str
    access_token: str
    on_prem: bool = False
    timezone: str = "UTC"

    def __repr__(self) -> str:
        """Represent the context without leaking the access token."""
        return (
            f"ClientContext(backend_host={self.backend_host!r}, access_token='***', "
            f"on_prem={self.on_prem!r}, timezone={self.timezone!r})"
        )


@dataclass(frozen=True)
class RequestSpec:
    """A single logical request before URL and header composition.

    Attributes:
        method: HTTP verb.
        url_template: URL template with ``{placeholder}`` segments.
        path_params: Values for the non-host placeholders.
        headers: Caller headers overlaid on the defaults. None values drop the key.
        body: Optional JSON body.
        on_prem: Per-request override of the context's transport selection.
    """

    method: HttpMethod
    url_template: str
    path_params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str | None] = field(default_factory=dict)
    body: Any = None
    on_prem: bool | None = None


@dataclass(frozen=True)
class LoginRequest:
    """Credentials for the login endpoint.

    Attributes:
        username: Account email or username.
        password: Account password.
        fcm_token: Optional push notification token.
    """

    username: str
    password: str
    fcm_token: str | None = None

    def __repr__(self) -> str:
        """Represent the request without leaking the password."""
        return f"LoginRequest(username={self.username!r}, password='***', fcm_token={self.fcm_token!r})"


@dataclass
class LoginResponse:
    """Response from the login endpoint.

    Attributes:
        success: Whether the server accepted the credentials.
        authorization: Access token to use as the bearer token.
        refresh_token: Token for obtaining a new access token.
        if_token: Secondary token issued by the platform.
        version: Platform version string.
        errors: Error entries reported by the server.
        user: Raw user profile data.
        raw_data: Complete decoded response.
    """

    success: bool
    authorization: str
    refresh_token: str = ""
    if_token: str = ""
    version: str = ""
    errors: list[Any] = field(default_factory=list)
    user: dict[str, Any] = field(default_factory=dict)
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> str | None:
        """Get the logged-in user's ID, if present."""
        user_id = self.user.get("id")
        return str(user_id) if user_id is not None else None

    @property
    def email(self) -> str | None:
        """Get the logged-in user's email, if present."""
        return self.user.get("email")
