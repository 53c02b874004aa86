"""Concrete infrastructure implementations and shared helpers."""

from .http import ApiClient, ApiResponse, RequestContext, build_api_client
from .resilience import (
    EXCLUDED_FROM_RETRY,
    FailureKind,
    HealthEndpointProbe,
    PendingRequest,
    RetryPolicy,
    SingleFlight,
)
from .token_store import FileTokenStore

__all__ = [
    "EXCLUDED_FROM_RETRY",
    "ApiClient",
    "ApiResponse",
    "FailureKind",
    "FileTokenStore",
    "HealthEndpointProbe",
    "PendingRequest",
    "RequestContext",
    "RetryPolicy",
    "SingleFlight",
    "build_api_client",
]
