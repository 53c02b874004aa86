"""Custom exceptions for the shop client.

Each failure class has its own type so that slices and the CLI can react to
authentication, connectivity and validation problems without string matching.
"""

from __future__ import annotations

from collections.abc import Mapping

GENERIC_ERROR_MESSAGE = "An error occurred. Please try again."
SESSION_EXPIRED_MESSAGE = "Token refresh failed. Please login again."
NETWORK_UNAVAILABLE_MESSAGE = "Network unavailable. Please check your connection."
TRANSIENT_FAILURE_MESSAGE = "The service is temporarily unavailable. Please try again."


class ShopClientError(Exception):
    """Base exception for all shop client errors."""

    pass


class MissingRequestContextError(ShopClientError):
    """Raised when a failure arrives without the request that caused it.

    Such failures cannot be classified or retried.
    """

    def __init__(self, detail: str = "no request context") -> None:
        super().__init__(f"Request failed before it could be described: {detail}")


class ApiRequestError(ShopClientError):
    """Raised when a request fails and is surfaced to the caller unchanged."""

    def __init__(
        self,
        *,
        method: str,
        url: str,
        status: int | None,
        server_message: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.method = method
        self.url = url
        self.status = status
        self.server_message = server_message
        if server_message:
            message = server_message
        elif detail:
            message = detail
        elif status is not None:
            message = f"Request failed with status code {status}"
        else:
            message = GENERIC_ERROR_MESSAGE
        super().__init__(message)


class TransientRequestError(ApiRequestError):
    """Raised when a network-class or 5xx failure outlives every retry."""

    def __init__(
        self,
        *,
        method: str,
        url: str,
        status: int | None,
        attempts: int,
        server_message: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.attempts = attempts
        super().__init__(
            method=method,
            url=url,
            status=status,
            server_message=server_message,
            detail=detail or TRANSIENT_FAILURE_MESSAGE,
        )


class InvalidResponseError(ApiRequestError):
    """Raised when a successful response carries a body that is not JSON."""

    def __init__(self, *, method: str, url: str, status: int) -> None:
        super().__init__(
            method=method,
            url=url,
            status=status,
            detail=f"Expected a JSON response from {method} {url}.",
        )


class SessionExpiredError(ShopClientError):
    """Raised when the server rejects the session (401) and the token is discarded.

    The user has to sign in again; there is no refresh endpoint.
    """

    status = 401

    def __init__(self, message: str = SESSION_EXPIRED_MESSAGE) -> None:
        super().__init__(message)


class NetworkUnavailableError(ShopClientError):
    """Raised when the connectivity probe fails between retry attempts."""

    def __init__(self, message: str = NETWORK_UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)


class CheckoutValidationError(ShopClientError):
    """Raised when checkout details fail client-side validation.

    These errors never reach the network and are never dispatched to a slice.
    """

    def __init__(self, section: str, field_errors: Mapping[str, str]) -> None:
        self.section = section
        self.field_errors = dict(field_errors)
        fields = ", ".join(sorted(self.field_errors))
        super().__init__(f"Please fix the {section} details: {fields}")


class EmptyCartError(ShopClientError):
    """Raised when checkout is attempted with no items in the cart."""

    def __init__(self) -> None:
        super().__init__("Please add items before checkout")


class PaymentDeclinedError(ShopClientError):
    """Raised when payment verification reports a failure."""

    def __init__(self, message: str = "Payment failed. Please try again.") -> None:
        super().__init__(message)


class OrderPlacementError(ShopClientError):
    """Raised when the order request is rejected after payment verification."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigFileNotFoundError(ShopClientError):
    """Raised when an explicitly requested config file is missing."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(ShopClientError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} could not be parsed: {detail}")


class ConfigFileValidationError(ShopClientError):
    """Raised when a config file does not match the expected schema."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is invalid: {detail}")


def user_message(error: BaseException) -> str:
    """Return the message a slice should show for an error.

    Server-supplied messages win; otherwise the error's own text, then a generic fallback.
    """
    if isinstance(error, ApiRequestError) and error.server_message:
        return error.server_message
    text = str(error).strip()
    return text or GENERIC_ERROR_MESSAGE
