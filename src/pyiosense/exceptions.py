"""Custom exceptions for pyiosense library."""

from __future__ import annotations

from typing import Any


class IosenseError(Exception):
    """Base exception for all IOsense errors."""


class NetworkError(IosenseError):
    """Exception raised when no response was received (connection failure or timeout).

    Attributes:
        url: Request URL, if known.
    """

    def __init__(self, message: str = "", url: str | None = None) -> None:
        """Initialize NetworkError.

        Args:
            message: Error message.
            url: Request URL, if known.
        """
        super().__init__(message)
        self.url = url


class HttpStatusError(IosenseError):
    """Exception raised when the server answers with a non-2xx status.

    The message uses the diagnostic layout shared by every endpoint:
    status code, URL, server header and raw response body.

    Attributes:
        url: Request URL.
        status: HTTP status code.
        body: Raw response body text.
        server: Value of the ``Server`` response header, if any.
    """

    def __init__(self, url: str, status: int, body: str = "", server: str | None = None) -> None:
        """Initialize HttpStatusError.

        Args:
            url: Request URL.
            status: HTTP status code.
            body: Raw response body text.
            server: Value of the ``Server`` response header, if any.
        """
        super().__init__(format_error_message(url, status=status, server=server, body=body))
        self.url = url
        self.status = status
        self.body = body
        self.server = server


class DecodeError(IosenseError):
    """Exception raised when a 2xx response body is not valid JSON.

    Attributes:
        url: Request URL.
        status: HTTP status code of the undecodable response.
        body: Raw response body text.
    """

    def __init__(self, message: str = "", url: str | None = None, status: int | None = None, body: str = "") -> None:
        """Initialize DecodeError."""
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body


class MalformedTemplateError(IosenseError):
    """Exception raised when a URL template has placeholders without substitutions.

    Attributes:
        template: The offending URL template.
        missing: Names of the placeholders that had no value.
    """

    def __init__(self, template: str, missing: list[str]) -> None:
        """Initialize MalformedTemplateError.

        Args:
            template: The offending URL template.
            missing: Names of the placeholders that had no value.
        """
        names = ", ".join(f"{{{name}}}" for name in missing)
        super().__init__(f"No substitution for {names} in URL template {template!r}")
        self.template = template
        self.missing = missing


class RetriesExhaustedError(IosenseError):
    """Exception raised when a request failed on every allowed attempt.

    Attributes:
        attempts: Number of dispatches that were made.
        last_error: The error seen on the final attempt.
    """

    def __init__(self, message: str = "", *, attempts: int = 0, last_error: BaseException | None = None) -> None:
        """Initialize RetriesExhaustedError.

        Args:
            message: Error message.
            attempts: Number of dispatches that were made.
            last_error: The error seen on the final attempt.
        """
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error

    @property
    def url(self) -> str | None:
        """Request URL of the last attempt, when the underlying error carries one."""
        return getattr(self.last_error, "url", None)

    @property
    def status(self) -> int | None:
        """HTTP status of the last response, when one was received."""
        return getattr(self.last_error, "status", None)


class RequestCancelledError(IosenseError):
    """Exception raised when a request is cancelled or its deadline elapses.

    Attributes:
        attempts: Number of dispatches started before cancellation.
        last_error: The most recent attempt failure, if any.
    """

    def __init__(self, message: str = "", *, attempts: int = 0, last_error: BaseException | None = None) -> None:
        """Initialize RequestCancelledError."""
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class AuthenticationError(IosenseError):
    """Exception raised for login failures.

    Attributes:
        status: HTTP status of the rejected login, if any.
    """

    def __init__(self, message: str = "", status: int | None = None) -> None:
        """Initialize AuthenticationError."""
        super().__init__(message)
        self.status = status


class InvalidParameterError(IosenseError):
    """Exception raised for invalid parameter values.

    Attributes:
        parameter_name: Optional name of the invalid parameter.
        value: Optional value that was invalid.
    """

    def __init__(
        self,
        message: str = "",
        parameter_name: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize InvalidParameterError.

        Args:
            message: Error message.
            parameter_name: Optional name of the invalid parameter.
            value: Optional value that was invalid.
        """
        super().__init__(message)
        self.parameter_name = parameter_name
        self.value = value


def format_error_message(
    url: str,
    *,
    status: int | None = None,
    server: str | None = None,
    body: str | None = None,
) -> str:
    """Build the multi-line diagnostic message for a failed request.

    Args:
        url: Request URL.
        status: HTTP status code, or None when no response was received.
        server: ``Server`` response header.
        body: Raw response body.

    Returns:
        Message in the ``[STATUS CODE] / [URL] / [SERVER INFO] / [RESPONSE]`` layout.
    """
    if status is None:
        return f"\n[URL] {url}\n[EXCEPTION] No response received"
    return f"\n[STATUS CODE] {status}\n[URL] {url}\n[SERVER INFO] {server or 'Unknown Server'}\n[RESPONSE] {body}"
