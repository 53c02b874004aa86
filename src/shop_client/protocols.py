"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces that client components depend on,
enabling isolated unit testing with fake implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import requests

    from .domain.checkout import CardDetails, PaymentResult


@runtime_checkable
class TokenStore(Protocol):
    """Durable storage for the single bearer credential."""

    def get(self) -> str | None:
        """Return the last persisted token, or None when signed out."""
        ...

    def set(self, token: str) -> None:
        """Persist the token, replacing any previous value."""
        ...

    def clear(self) -> None:
        """Remove the stored token."""
        ...


@runtime_checkable
class HttpSession(Protocol):
    """The subset of `requests.Session` the API client relies on."""

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, object] | None = None,
        json: object | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> requests.Response:
        """Send a request and return the raw response."""
        ...


@runtime_checkable
class ConnectivityProbe(Protocol):
    """Liveness check used between retry attempts."""

    def is_connected(self) -> bool:
        """Return True when the API host looks reachable."""
        ...


@runtime_checkable
class PaymentGateway(Protocol):
    """Payment verification used by checkout."""

    def verify(self, card: CardDetails) -> PaymentResult:
        """Verify the card and return the outcome."""
        ...
