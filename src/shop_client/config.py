"""Centralised, injectable configuration for the shop client."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Self

from dotenv import load_dotenv

from .config_file import ClientConfigFile

DEFAULT_API_PORT = 9090
FALLBACK_API_BASE = f"http://localhost:{DEFAULT_API_PORT}/api"
DEFAULT_TOKEN_PATH = str(Path.home() / ".shop_client" / "storage.json")


class PositiveNumberEnvVarError(ValueError):
    """Raised when an environment variable must be a positive number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive number.")


class NonNegativeNumberEnvVarError(ValueError):
    """Raised when an environment variable must be zero or greater."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be zero or a positive number.")


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for the API client, token store and retry engine.

    Load from environment with `ClientConfig.from_env()` or construct directly for testing.
    """

    api_base: str = FALLBACK_API_BASE
    timeout_seconds: float = 10.0

    # Retry engine
    max_retries: int = 3
    retry_base_delay_seconds: float = 1.0
    retry_jitter_seconds: float = 1.0

    # Connectivity probe between retries (empty path disables probing)
    health_path: str = "/health"
    probe_timeout_seconds: float = 2.0

    # Durable credential storage
    token_path: str = DEFAULT_TOKEN_PATH

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            ClientConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            api_base=resolve_api_base(
                override=os.getenv("SHOP_API_BASE", ""),
                host=os.getenv("SHOP_API_HOST", ""),
                dev_server_url=os.getenv("SHOP_DEV_SERVER_URL", ""),
                port=_parse_positive_int(
                    os.getenv("SHOP_API_PORT", str(DEFAULT_API_PORT)), env_name="SHOP_API_PORT"
                ),
            ),
            timeout_seconds=_parse_positive_float(
                os.getenv("SHOP_TIMEOUT_SECONDS", "10"), env_name="SHOP_TIMEOUT_SECONDS"
            ),
            max_retries=_parse_non_negative_int(
                os.getenv("SHOP_MAX_RETRIES", "3"), env_name="SHOP_MAX_RETRIES"
            ),
            retry_base_delay_seconds=_parse_non_negative_float(
                os.getenv("SHOP_RETRY_BASE_DELAY_SECONDS", "1.0"),
                env_name="SHOP_RETRY_BASE_DELAY_SECONDS",
            ),
            retry_jitter_seconds=_parse_non_negative_float(
                os.getenv("SHOP_RETRY_JITTER_SECONDS", "1.0"),
                env_name="SHOP_RETRY_JITTER_SECONDS",
            ),
            health_path=os.getenv("SHOP_HEALTH_PATH", "/health").strip(),
            probe_timeout_seconds=_parse_positive_float(
                os.getenv("SHOP_PROBE_TIMEOUT_SECONDS", "2"),
                env_name="SHOP_PROBE_TIMEOUT_SECONDS",
            ),
            token_path=os.getenv("SHOP_TOKEN_PATH", "").strip() or DEFAULT_TOKEN_PATH,
        )

    def with_overrides(self, *, api_base: str | None = None) -> Self:
        """Return a new config with specified overrides (for CLI options)."""
        return replace(
            self,
            api_base=self.api_base if api_base is None else api_base.strip().rstrip("/"),
        )

    def with_file_overrides(self, file_config: ClientConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        return replace(
            self,
            api_base=self.api_base if file_config.api_base is None else file_config.api_base,
            timeout_seconds=self.timeout_seconds
            if file_config.timeout_seconds is None
            else file_config.timeout_seconds,
            max_retries=self.max_retries
            if file_config.max_retries is None
            else file_config.max_retries,
            retry_base_delay_seconds=self.retry_base_delay_seconds
            if file_config.retry_base_delay_seconds is None
            else file_config.retry_base_delay_seconds,
            retry_jitter_seconds=self.retry_jitter_seconds
            if file_config.retry_jitter_seconds is None
            else file_config.retry_jitter_seconds,
            health_path=self.health_path
            if file_config.health_path is None
            else file_config.health_path,
            probe_timeout_seconds=self.probe_timeout_seconds
            if file_config.probe_timeout_seconds is None
            else file_config.probe_timeout_seconds,
            token_path=self.token_path if file_config.token_path is None else file_config.token_path,
        )


def resolve_api_base(
    *,
    override: str = "",
    host: str = "",
    dev_server_url: str = "",
    port: int = DEFAULT_API_PORT,
) -> str:
    """Resolve the API base URL once at startup.

    Order: explicit override, then a host derived from the environment (an explicit
    host, or the host of the development server URL), then the local fallback.
    """
    explicit = override.strip()
    if explicit:
        return explicit.rstrip("/")

    derived = normalise_host(host) or normalise_host(dev_server_url)
    if derived:
        return f"http://{derived}:{port}/api"

    return FALLBACK_API_BASE


def normalise_host(value: str) -> str | None:
    """Reduce a URL or `host:port` string to a lowercase host name."""
    text = value.strip()
    if not text:
        return None
    for scheme in ("http://", "https://", "exp://"):
        if text.startswith(scheme):
            text = text[len(scheme) :]
            break
    host = text.split("/")[0].split(":")[0].strip().lower()
    return host or None


def _parse_positive_float(value: str, *, env_name: str) -> float:
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed <= 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_positive_int(value: str, *, env_name: str) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_non_negative_float(value: str, *, env_name: str) -> float:
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise NonNegativeNumberEnvVarError(env_name) from exc
    if parsed < 0:
        raise NonNegativeNumberEnvVarError(env_name)
    return parsed


def _parse_non_negative_int(value: str, *, env_name: str) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise NonNegativeNumberEnvVarError(env_name) from exc
    if parsed < 0:
        raise NonNegativeNumberEnvVarError(env_name)
    return parsed
