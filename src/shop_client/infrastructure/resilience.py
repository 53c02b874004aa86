"""Resilience utilities for the API client.

Usage example:
    from shop_client.infrastructure.resilience import RetryPolicy, SingleFlight

    policy = RetryPolicy(max_retries=3, base_delay_seconds=1.0, jitter_seconds=1.0)
    delay = policy.compute_backoff(attempt=0)

    invalidation: SingleFlight[str | None] = SingleFlight()
    replacement = invalidation.run_exclusive(discard_token)
"""

from __future__ import annotations

import random
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import override

import requests

from ..observability import get_logger
from ..protocols import ConnectivityProbe, HttpSession

logger = get_logger("shop_client.infrastructure.resilience")

# Calls to these endpoints are never retried and never trigger session invalidation.
EXCLUDED_FROM_RETRY: tuple[str, ...] = ("/auth/login", "/auth/signup", "/auth/profile")


class FailureKind(StrEnum):
    """Classification of a failed call, in the order it is checked."""

    AUTHENTICATION = "authentication"
    NETWORK = "network"
    SERVER = "server"
    OTHER = "other"


@dataclass
class RetryPolicy:
    """Retry policy for network-class and server failures.

    Delay for attempt n (0-based) is `base * 2**n` plus a jitter drawn from
    `[0, jitter)`, so with jitter <= base the schedule strictly increases.
    """

    max_retries: int = 3
    base_delay_seconds: float = 1.0
    jitter_seconds: float = 1.0
    excluded_paths: tuple[str, ...] = EXCLUDED_FROM_RETRY
    retry_exceptions: tuple[type[Exception], ...] = (requests.Timeout, requests.ConnectionError)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def compute_backoff(self, attempt: int) -> float:
        """Return the delay in seconds before retry number `attempt + 1`."""
        delay = self.base_delay_seconds * (2**attempt)
        if self.jitter_seconds > 0:
            delay += self.rng.random() * self.jitter_seconds
        return float(delay)

    def is_excluded(self, path: str) -> bool:
        return any(endpoint in path for endpoint in self.excluded_paths)

    def can_retry(self, retry_count: int) -> bool:
        return retry_count < self.max_retries

    def classify_status(self, status: int) -> FailureKind:
        if status == 401:
            return FailureKind.AUTHENTICATION
        if status >= 500:
            return FailureKind.SERVER
        return FailureKind.OTHER


class PendingRequest[T]:
    """A caller parked behind an in-flight exclusive operation.

    Settled exactly once, with the leader's result or its exception.
    """

    def __init__(self) -> None:
        self._settled = threading.Event()
        self._result: T | None = None
        self._error: BaseException | None = None

    def resolve(self, result: T) -> None:
        self._result = result
        self._settled.set()

    def reject(self, error: BaseException) -> None:
        self._error = error
        self._settled.set()

    def wait(self) -> T:
        self._settled.wait()
        if self._error is not None:
            raise self._error
        return self._result  # type: ignore[return-value]


class SingleFlight[T]:
    """Run one instance of an operation at a time and share its outcome.

    The first caller of `run_exclusive` becomes the leader and runs the
    operation. Callers arriving while it runs are queued and settle with the
    leader's result (or exception) once it finishes; they never run the
    operation themselves.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight = False
        self._waiters: list[PendingRequest[T]] = []

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._waiters)

    def run_exclusive(self, operation: Callable[[], T]) -> T:
        with self._lock:
            if self._in_flight:
                waiter: PendingRequest[T] | None = PendingRequest()
                self._waiters.append(waiter)
            else:
                self._in_flight = True
                waiter = None

        if waiter is not None:
            return waiter.wait()

        try:
            result = operation()
        except BaseException as exc:
            for pending in self._drain():
                pending.reject(exc)
            raise
        for pending in self._drain():
            pending.resolve(result)
        return result

    def _drain(self) -> list[PendingRequest[T]]:
        with self._lock:
            waiters = self._waiters
            self._waiters = []
            self._in_flight = False
        return waiters


@dataclass
class HealthEndpointProbe(ConnectivityProbe):
    """Probe a lightweight health endpoint directly, outside the retry engine.

    Any HTTP reply counts as connected; only a transport failure does not.
    """

    session: HttpSession
    url: str
    timeout_seconds: float = 2.0

    @override
    def is_connected(self) -> bool:
        try:
            response = self.session.request("GET", self.url, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            logger.warning("Connectivity check failed: %s", exc)
            return False
        if response.status_code >= 400:
            logger.info("Connectivity check reached host, status=%s", response.status_code)
        return True
