"""URL template formatting and header composition.

Endpoint URLs are stored as templates such as
``"{protocol}://{backend_url}/api/account/devices/getDeviceData/{id}"``.
This module turns them into concrete URLs for a given ClientContext and
builds the header set sent with every request.

These functions are pure: identical inputs always give identical outputs.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from pyiosense.const import PROTOCOL_HTTP, PROTOCOL_HTTPS
from pyiosense.exceptions import MalformedTemplateError


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pyiosense.models import ClientContext


__all__ = [
    "create_headers",
    "format_path_value",
    "format_url",
    "merge_headers",
]

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

# Both names refer to the backend host; insight endpoints use "data_url"
_HOST_PLACEHOLDERS = frozenset({"backend_url", "data_url"})


def format_path_value(value: Any) -> str:
    """Convert a path substitution to its percent-encoded URL form.

    Booleans are rendered in lowercase ("true"/"false") as the platform expects.

    Args:
        value: Substitution value (str, int, float or bool).

    Returns:
        Percent-encoded string safe to place in a single path segment.
    """
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return quote(text, safe="")


def format_url(
    template: str,
    context: ClientContext,
    path_params: Mapping[str, Any] | None = None,
    *,
    on_prem: bool | None = None,
) -> str:
    """Substitute every placeholder of a URL template.

    Args:
        template: URL template, e.g. "{protocol}://{backend_url}/x/{id}".
        context: Client context supplying protocol selection and host.
        path_params: Values for the remaining placeholders.
        on_prem: Optional override of ``context.on_prem`` for this URL.

    Returns:
        Concrete URL.

    Raises:
        MalformedTemplateError: If any placeholder has no substitution.

    Example:
        >>> ctx = ClientContext(backend_host="api.example.com", access_token="t")
        >>> format_url("{protocol}://{backend_url}/x/{id}", ctx, {"id": "42"})
        'https://api.example.com/x/42'
    """
    params = path_params or {}
    use_http = context.on_prem if on_prem is None else on_prem
    missing: list[str] = []

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == "protocol":
            return PROTOCOL_HTTP if use_http else PROTOCOL_HTTPS
        if name in _HOST_PLACEHOLDERS:
            return context.backend_host
        if name not in params or params[name] is None:
            missing.append(name)
            return match.group(0)
        return format_path_value(params[name])

    url = _PLACEHOLDER.sub(_substitute, template)

    if missing:
        raise MalformedTemplateError(template, missing)

    return url


def merge_headers(
    base: Mapping[str, str | None],
    overrides: Mapping[str, str | None] | None = None,
) -> dict[str, str | None]:
    """Overlay ``overrides`` on ``base`` with case-insensitive header names.

    An override replaces any base entry whose name differs only in case, so
    each header is sent at most once. None values are kept for the caller
    to drop.
    """
    merged = dict(base)

    for key, value in (overrides or {}).items():
        for existing in [name for name in merged if name.lower() == key.lower()]:
            del merged[existing]
        merged[key] = value

    return merged


def create_headers(
    context: ClientContext,
    extra_headers: Mapping[str, str | None] | None = None,
) -> dict[str, str]:
    """Build request headers from the bearer token and caller overrides.

    Caller headers win on key collision. Header names are matched
    case-insensitively so only one authorization header is ever sent.
    Entries whose value is None are dropped.

    Args:
        context: Client context supplying the access token.
        extra_headers: Optional caller headers.

    Returns:
        Merged header mapping.
    """
    merged = merge_headers({"Authorization": f"Bearer {context.access_token}"}, extra_headers)
    return {key: value for key, value in merged.items() if value is not None}
