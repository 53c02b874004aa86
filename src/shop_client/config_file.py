"""Typed parsing and validation for client config files."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class ClientConfigFile:
    """Validated client config values loaded from a TOML file."""

    api_base: str | None = None
    timeout_seconds: float | None = None
    max_retries: int | None = None
    retry_base_delay_seconds: float | None = None
    retry_jitter_seconds: float | None = None
    health_path: str | None = None
    probe_timeout_seconds: float | None = None
    token_path: str | None = None


class _ClientSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    api_base: str | None = None
    timeout_seconds: float | None = None
    max_retries: int | None = None
    retry_base_delay_seconds: float | None = None
    retry_jitter_seconds: float | None = None
    health_path: str | None = None
    probe_timeout_seconds: float | None = None
    token_path: str | None = None

    @field_validator("api_base")
    @classmethod
    def _validate_api_base(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip().rstrip("/")
        if not text.startswith(("http://", "https://")):
            raise ValueError
        return text

    @field_validator("token_path")
    @classmethod
    def _validate_non_empty_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("health_path")
    @classmethod
    def _validate_health_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if text and not text.startswith("/"):
            raise ValueError
        return text

    @field_validator("timeout_seconds", "probe_timeout_seconds")
    @classmethod
    def _validate_positive_float(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if value <= 0:
            raise ValueError
        return value

    @field_validator("retry_base_delay_seconds", "retry_jitter_seconds")
    @classmethod
    def _validate_non_negative_float(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value

    @field_validator("max_retries")
    @classmethod
    def _validate_retries(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    client: _ClientSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_client_config_file(path: Path) -> ClientConfigFile:
    """Load and validate a client TOML config file."""
    if not path.exists():
        raise ConfigFileNotFoundError(str(path))

    raw_payload = path.read_text(encoding="utf-8")
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), _format_validation_error(exc)) from exc

    section = model.client
    return ClientConfigFile(
        api_base=section.api_base,
        timeout_seconds=section.timeout_seconds,
        max_retries=section.max_retries,
        retry_base_delay_seconds=section.retry_base_delay_seconds,
        retry_jitter_seconds=section.retry_jitter_seconds,
        health_path=section.health_path,
        probe_timeout_seconds=section.probe_timeout_seconds,
        token_path=section.token_path,
    )
