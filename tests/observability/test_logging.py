"""Tests for shared observability logging."""

import logging
import time

import pytest

from shop_client.observability.logging import format_event, get_logger


def test_get_logger_formats_utc_timestamps(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    fixed = time.struct_time((2020, 1, 2, 3, 4, 5, 3, 2, 0))

    def fake_gmtime(_: float | None = None) -> time.struct_time:
        return fixed

    monkeypatch.setattr(time, "gmtime", fake_gmtime)

    name = "shop_client.test.logging"
    logger = get_logger(name)
    logger.info("Hello")

    captured = capsys.readouterr()
    assert "2020-01-02T03:04:05+0000 INFO shop_client.test.logging: Hello" in captured.err


def test_get_logger_is_singleton_per_name() -> None:
    name = "shop_client.test.logging.singleton"
    logger = get_logger(name)
    logger_again = get_logger(name)

    assert logger is logger_again
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_format_event_renders_key_values() -> None:
    line = format_event("retry", method="GET", url="/cart", status=None, attempt="1/3")
    assert line == "retry method=GET url=/cart attempt=1/3"


def test_format_event_quotes_whitespace_and_empty_values() -> None:
    line = format_event("error", message="Cart is empty", token="")
    assert line == 'error message="Cart is empty" token=""'
