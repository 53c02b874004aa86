"""HTTP client for the shop API.

Usage example:
    from pathlib import Path

    from shop_client.config import ClientConfig
    from shop_client.infrastructure.http import build_api_client
    from shop_client.infrastructure.token_store import FileTokenStore

    config = ClientConfig.from_env()
    client = build_api_client(config=config, token_store=FileTokenStore(Path(config.token_path)))
    products = client.get("/products").data
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace

import requests

from ..config import ClientConfig
from ..exceptions import (
    ApiRequestError,
    InvalidResponseError,
    MissingRequestContextError,
    NetworkUnavailableError,
    SessionExpiredError,
    TransientRequestError,
)
from ..observability import format_event, get_logger
from ..protocols import ConnectivityProbe, HttpSession, TokenStore
from .io.validation import extract_server_message
from .resilience import FailureKind, HealthEndpointProbe, RetryPolicy, SingleFlight

logger = get_logger("shop_client.infrastructure.http")

DEFAULT_HEADERS: Mapping[str, str] = {"Content-Type": "application/json"}


def _empty_headers() -> dict[str, str]:
    return {}


@dataclass(frozen=True)
class RequestContext:
    """Description of one outbound call, carried through every retry.

    `retry_count` is None until the request interceptor has seen the call.
    """

    method: str
    path: str
    params: Mapping[str, object] | None = None
    json: object | None = None
    headers: dict[str, str] = field(default_factory=_empty_headers)
    retry_count: int | None = None
    reissued_after_auth: bool = False


@dataclass(frozen=True)
class ApiResponse:
    """A successful response with its decoded body (None when there is no content)."""

    status_code: int
    data: object | None
    context: RequestContext


def _token_preview(token: str) -> str:
    return f"{token[:20]}..."


def _decode_body(response: requests.Response) -> object | None:
    """Decode a JSON body; empty bodies decode to None and non-JSON text to the raw string."""
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """JSON API client with bearer auth, retry with backoff, and session invalidation.

    Every call passes through the same two steps:
    - the request interceptor attaches the stored token and tags the call with a retry counter
    - the response handling classifies failures:
        - 401 (non-excluded) discards the token once for all concurrent callers
        - network-class errors and 5xx (non-excluded) retry with exponential backoff
        - everything else is surfaced unchanged
    """

    def __init__(
        self,
        *,
        session: HttpSession,
        base_url: str,
        token_store: TokenStore,
        retry_policy: RetryPolicy | None = None,
        probe: ConnectivityProbe | None = None,
        timeout_seconds: float = 10.0,
        default_headers: Mapping[str, str] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        renew_credential: Callable[[], str | None] | None = None,
    ) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.token_store = token_store
        self.retry_policy = retry_policy or RetryPolicy()
        self.probe = probe
        self.timeout_seconds = timeout_seconds
        self.default_headers = dict(DEFAULT_HEADERS if default_headers is None else default_headers)
        self._sleep = sleep
        self._renew_credential = renew_credential
        self._invalidation: SingleFlight[str | None] = SingleFlight()

    @property
    def invalidation(self) -> SingleFlight[str | None]:
        """Coordinator shared by every call that hits 401."""
        return self._invalidation

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def get(self, path: str, *, params: Mapping[str, object] | None = None) -> ApiResponse:
        return self.request(RequestContext(method="GET", path=path, params=params))

    def post(
        self,
        path: str,
        *,
        json: object | None = None,
        params: Mapping[str, object] | None = None,
    ) -> ApiResponse:
        return self.request(RequestContext(method="POST", path=path, params=params, json=json))

    def put(
        self,
        path: str,
        *,
        json: object | None = None,
        params: Mapping[str, object] | None = None,
    ) -> ApiResponse:
        return self.request(RequestContext(method="PUT", path=path, params=params, json=json))

    def delete(self, path: str) -> ApiResponse:
        return self.request(RequestContext(method="DELETE", path=path))

    def request(self, context: RequestContext | None) -> ApiResponse:
        """Issue a call and resolve it to a response or a classified error.

        Raises:
            MissingRequestContextError: If no call description was supplied
            SessionExpiredError: On 401 from a non-excluded endpoint (token discarded)
            NetworkUnavailableError: If the connectivity probe fails between retries
            TransientRequestError: If network/5xx failures outlast every retry
            ApiRequestError: For every other failure
        """
        if context is None:
            logger.error(format_event("error", reason="no request context"))
            raise MissingRequestContextError()

        prepared = self._intercept_request(context)
        while True:
            try:
                response = self.session.request(
                    prepared.method,
                    self.url_for(prepared.path),
                    params=prepared.params,
                    json=prepared.json,
                    headers={**self.default_headers, **prepared.headers},
                    timeout=self.timeout_seconds,
                )
            except self.retry_policy.retry_exceptions as exc:
                prepared = self._schedule_retry(prepared, status=None, error=exc)
                continue
            except requests.RequestException as exc:
                logger.error(self._event("error", prepared, error=type(exc).__name__))
                raise ApiRequestError(
                    method=prepared.method,
                    url=prepared.path,
                    status=None,
                    detail=str(exc),
                ) from exc

            if response.status_code < 400:
                logger.info(self._event("response", prepared, status=response.status_code))
                return self._to_api_response(response, prepared)

            kind = self.retry_policy.classify_status(response.status_code)
            excluded = self.retry_policy.is_excluded(prepared.path)
            if kind is FailureKind.AUTHENTICATION and not excluded:
                prepared = self._handle_unauthorised(prepared, response)
                continue
            if kind is FailureKind.SERVER and not excluded:
                prepared = self._schedule_retry(prepared, status=response.status_code, error=None)
                continue
            raise self._final_error(prepared, response)

    def _intercept_request(self, context: RequestContext) -> RequestContext:
        """Attach the bearer token (when one is stored) and initialise the retry counter."""
        headers = dict(context.headers)
        headers.pop("Authorization", None)
        token = self.token_store.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        prepared = replace(
            context,
            headers=headers,
            retry_count=0 if context.retry_count is None else context.retry_count,
        )
        logger.info(
            self._event("request", prepared, token=_token_preview(token) if token else "none")
        )
        return prepared

    def _handle_unauthorised(
        self, context: RequestContext, response: requests.Response
    ) -> RequestContext:
        """Discard the session once, however many calls hit 401 together.

        Returns the context to re-issue when a replacement credential exists;
        otherwise raises SessionExpiredError.
        """
        logger.warning(self._event("unauthorised", context, status=response.status_code))
        if context.reissued_after_auth:
            raise SessionExpiredError()
        replacement = self._invalidation.run_exclusive(self._invalidate_session)
        if replacement is None:
            raise SessionExpiredError()
        headers = {**context.headers, "Authorization": f"Bearer {replacement}"}
        return replace(context, headers=headers, reissued_after_auth=True)

    def _invalidate_session(self) -> str | None:
        token = self.token_store.get()
        if token:
            self.token_store.clear()
            logger.info("Invalid token cleared from storage")
        if self._renew_credential is None:
            return None
        replacement = self._renew_credential()
        if replacement:
            self.token_store.set(replacement)
        return replacement or None

    def _schedule_retry(
        self,
        context: RequestContext,
        *,
        status: int | None,
        error: Exception | None,
    ) -> RequestContext:
        """Wait out the backoff and return the next attempt, or raise if none remain."""
        attempt = context.retry_count or 0
        error_name = type(error).__name__ if error is not None else None
        if self.retry_policy.is_excluded(context.path):
            logger.error(self._event("error", context, status=status, error=error_name))
            raise ApiRequestError(
                method=context.method,
                url=context.path,
                status=status,
                detail=str(error) if error is not None else None,
            ) from error
        if not self.retry_policy.can_retry(attempt):
            logger.error(
                self._event("gave_up", context, status=status, error=error_name, attempts=attempt)
            )
            raise TransientRequestError(
                method=context.method,
                url=context.path,
                status=status,
                attempts=attempt,
            ) from error

        delay = self.retry_policy.compute_backoff(attempt)
        logger.warning(
            self._event(
                "retry",
                context,
                status=status,
                error=error_name,
                attempt=f"{attempt + 1}/{self.retry_policy.max_retries}",
                delay_ms=f"{delay * 1000:.0f}",
            )
        )
        self._sleep(delay)

        if self.probe is not None and not self.probe.is_connected():
            logger.error(self._event("offline", context, attempt=attempt + 1))
            raise NetworkUnavailableError() from error

        return self._intercept_request(replace(context, retry_count=attempt + 1))

    def _final_error(self, context: RequestContext, response: requests.Response) -> ApiRequestError:
        body = _decode_body(response)
        message = extract_server_message(body)
        logger.error(
            self._event(
                "error",
                context,
                status=response.status_code,
                message=message,
                retries=context.retry_count,
            )
        )
        return ApiRequestError(
            method=context.method,
            url=context.path,
            status=response.status_code,
            server_message=message,
        )

    def _to_api_response(self, response: requests.Response, context: RequestContext) -> ApiResponse:
        data = _decode_body(response)
        if isinstance(data, str):
            raise InvalidResponseError(
                method=context.method, url=context.path, status=response.status_code
            )
        return ApiResponse(status_code=response.status_code, data=data, context=context)

    def _event(self, event: str, context: RequestContext, **fields: object) -> str:
        return format_event(event, method=context.method, url=context.path, **fields)


def build_api_client(
    *,
    config: ClientConfig,
    token_store: TokenStore,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ApiClient:
    """Wire an ApiClient, its retry policy and its connectivity probe from configuration."""
    http_session = session or requests.Session()
    retry_policy = RetryPolicy(
        max_retries=config.max_retries,
        base_delay_seconds=config.retry_base_delay_seconds,
        jitter_seconds=config.retry_jitter_seconds,
    )
    probe: ConnectivityProbe | None = None
    if config.health_path:
        probe = HealthEndpointProbe(
            session=http_session,
            url=f"{config.api_base.rstrip('/')}{config.health_path}",
            timeout_seconds=config.probe_timeout_seconds,
        )
    return ApiClient(
        session=http_session,
        base_url=config.api_base,
        token_store=token_store,
        retry_policy=retry_policy,
        probe=probe,
        timeout_seconds=config.timeout_seconds,
        sleep=sleep,
    )
