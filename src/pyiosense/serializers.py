"""Serialization helpers for request bodies, timestamps and login responses.

This module provides stateless functions shared by the domain wrappers so
that DeviceAccess, InsightAccess and login build their payloads the same way.

Design Philosophy:
    - Stateless functions (no classes, no state)
    - Optional fields are omitted from bodies rather than sent as null
    - Naive timestamps are interpreted in the client's configured timezone
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pyiosense.const import DEFAULT_TIMEZONE, UNIX_SECONDS_DIGITS
from pyiosense.exceptions import InvalidParameterError
from pyiosense.models import LoginResponse


if TYPE_CHECKING:
    from collections.abc import Mapping


TimeValue = int | float | str | datetime


def _zone(tz: str) -> ZoneInfo:
    """Resolve an IANA timezone name.

    Raises:
        InvalidParameterError: If the timezone is unknown.
    """
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        msg = f"Unknown timezone: {tz!r}"
        raise InvalidParameterError(msg, parameter_name="timezone", value=tz) from exc


def _to_datetime(value: str | datetime, tz: str) -> datetime:
    """Convert a string or datetime to an aware datetime."""
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            msg = f"Cannot parse time value: {value!r}"
            raise InvalidParameterError(msg, parameter_name="time", value=value) from exc
    else:
        parsed = value

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_zone(tz))
    return parsed


def to_unix_seconds(value: TimeValue, tz: str = DEFAULT_TIMEZONE) -> int | float:
    """Convert a time value to a Unix timestamp in seconds.

    Numbers are passed through unchanged. Datetimes and ISO-8601 strings
    are converted; naive values are interpreted in ``tz``.

    Args:
        value: Epoch number, ISO-8601 string or datetime.
        tz: IANA timezone for naive values.

    Returns:
        Epoch seconds.

    Raises:
        InvalidParameterError: If the value cannot be converted.

    Example:
        >>> to_unix_seconds("2024-01-01T00:00:00Z")
        1704067200
        >>> to_unix_seconds(1704067200)
        1704067200
    """
    if isinstance(value, bool):
        msg = f"Invalid time value: {value!r}"
        raise InvalidParameterError(msg, parameter_name="time", value=value)

    if isinstance(value, int | float):
        return value

    if not isinstance(value, str | datetime):
        msg = f"Unsupported time value type: {type(value).__name__}"
        raise InvalidParameterError(msg, parameter_name="time", value=value)

    return int(_to_datetime(value, tz).timestamp())


def to_unix_millis(
    value: TimeValue | None = None,
    tz: str = DEFAULT_TIMEZONE,
    *,
    now: datetime | None = None,
) -> int:
    """Convert a time value to a Unix timestamp in milliseconds.

    Args:
        value: Epoch milliseconds, ISO-8601 string, datetime, or None for now.
        tz: IANA timezone for naive values.
        now: Reference time used when value is None. Defaults to the current time.

    Returns:
        Epoch milliseconds.

    Raises:
        InvalidParameterError: If a number is not a positive millisecond
            timestamp (more than 10 digits), or the value cannot be parsed.
    """
    if value is None:
        reference = now or datetime.now(UTC)
        return int(reference.timestamp() * 1000)

    if isinstance(value, bool):
        msg = f"Invalid time value: {value!r}"
        raise InvalidParameterError(msg, parameter_name="time", value=value)

    if isinstance(value, int | float):
        if value <= 0 or len(str(int(value))) <= UNIX_SECONDS_DIGITS:
            msg = "Unix timestamp must be a positive integer in milliseconds, not seconds"
            raise InvalidParameterError(msg, parameter_name="time", value=value)
        return int(value)

    if not isinstance(value, str | datetime):
        msg = f"Unsupported time value type: {type(value).__name__}"
        raise InvalidParameterError(msg, parameter_name="time", value=value)

    return int(_to_datetime(value, tz).timestamp() * 1000)


def to_iso8601(value: TimeValue, tz: str = DEFAULT_TIMEZONE) -> str:
    """Convert a time value to an ISO-8601 UTC string.

    Strings are passed through unchanged. Numbers are epoch milliseconds.

    Example:
        >>> to_iso8601(1704067200000)
        '2024-01-01T00:00:00.000Z'
    """
    if isinstance(value, str):
        return value

    if isinstance(value, bool):
        msg = f"Invalid time value: {value!r}"
        raise InvalidParameterError(msg, parameter_name="time", value=value)

    if isinstance(value, int | float):
        moment = datetime.fromtimestamp(value / 1000, tz=UTC)
    elif isinstance(value, datetime):
        moment = _to_datetime(value, tz).astimezone(UTC)
    else:
        msg = f"Unsupported time value type: {type(value).__name__}"
        raise InvalidParameterError(msg, parameter_name="time", value=value)

    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_body(fields: Mapping[str, Any], extra: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build a JSON body from optional fields and caller extras.

    Fields whose value is None are omitted. Extras are merged last and are
    kept as given.

    Example:
        >>> build_body({"projection": None, "populate": ["user"]}, {"limit": 5})
        {'populate': ['user'], 'limit': 5}
    """
    body = {key: value for key, value in fields.items() if value is not None}
    if extra:
        body.update(extra)
    return body


def deserialize_login_response(data: Mapping[str, Any]) -> LoginResponse:
    """Deserialize the /api/login response.

    Args:
        data: Decoded JSON body in format:
              {"success": bool, "authorization": str, "refresh_token": str,
               "ifToken": str, "version": str, "errors": [...], "user": {...}}

    Returns:
        LoginResponse with raw_data holding the complete response.
    """
    return LoginResponse(
        success=bool(data.get("success", False)),
        authorization=data.get("authorization") or "",
        refresh_token=data.get("refresh_token") or "",
        if_token=data.get("ifToken") or "",
        version=data.get("version") or "",
        errors=list(data.get("errors") or []),
        user=dict(data.get("user") or {}),
        raw_data=dict(data),
    )
