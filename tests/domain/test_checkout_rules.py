"""Tests for checkout form validation."""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from shop_client.domain.checkout import (
    CardDetails,
    ShippingDetails,
    is_valid_card_number,
    is_valid_email,
    is_valid_expiry,
    is_valid_phone,
    is_valid_zip_code,
    validate_card,
    validate_shipping,
)

TODAY = date(2026, 6, 15)

VALID_SHIPPING = ShippingDetails(
    first_name="Alice",
    last_name="Smith",
    email="alice@example.com",
    phone="(555) 123-4567",
    address="1 Main St",
    city="Springfield",
    state="IL",
    zip_code="62701",
)

VALID_CARD = CardDetails(
    card_number="4111 1111 1111 1111",
    cardholder_name="Alice Smith",
    expiry_date="12/27",
    cvv="123",
)


def test_valid_shipping_has_no_errors() -> None:
    assert validate_shipping(VALID_SHIPPING) == {}


def test_blank_shipping_reports_every_field() -> None:
    blank = ShippingDetails("", "", "", "", "", "", "", "")
    assert set(validate_shipping(blank)) == {
        "first_name",
        "last_name",
        "email",
        "phone",
        "address",
        "city",
        "state",
        "zip_code",
    }


@pytest.mark.parametrize(
    ("field", "value", "message"),
    [
        ("email", "alice@", "Please enter a valid email"),
        ("phone", "555-1234", "Please enter a valid 10-digit phone number"),
        ("zip_code", "6270", "Please enter a valid ZIP code (e.g., 12345 or 12345-6789)"),
    ],
)
def test_malformed_shipping_field(field: str, value: str, message: str) -> None:
    errors = validate_shipping(replace(VALID_SHIPPING, **{field: value}))
    assert errors == {field: message}


def test_format_address() -> None:
    assert VALID_SHIPPING.format_address() == "1 Main St, Springfield, IL 62701"
    assert VALID_SHIPPING.full_name == "Alice Smith"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("a@b.co", True),
        ("a b@c.com", False),
        ("nodomain@", False),
    ],
)
def test_is_valid_email(value: str, expected: bool) -> None:
    assert is_valid_email(value) is expected


def test_is_valid_phone_counts_digits() -> None:
    assert is_valid_phone("555-123-4567")
    assert not is_valid_phone("555-123-456")
    assert not is_valid_phone("555.123.4567")


def test_is_valid_zip_code_accepts_plus_four() -> None:
    assert is_valid_zip_code("62701-1234")
    assert not is_valid_zip_code("62701-12")


def test_is_valid_card_number_ignores_spaces() -> None:
    assert is_valid_card_number("4111 1111 1111 1111")
    assert not is_valid_card_number("4111 1111 111")
    assert not is_valid_card_number("4111-1111-1111-1111")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("06/26", True),
        ("05/26", False),
        ("01/27", True),
        ("12/25", False),
        ("13/27", False),
        ("6/27", False),
    ],
)
def test_is_valid_expiry(value: str, expected: bool) -> None:
    assert is_valid_expiry(value, today=TODAY) is expected


def test_valid_card_has_no_errors() -> None:
    assert validate_card(VALID_CARD, today=TODAY) == {}


def test_card_errors_are_keyed_by_field() -> None:
    card = CardDetails(card_number="123", cardholder_name="Al", expiry_date="01/20", cvv="12")
    assert validate_card(card, today=TODAY) == {
        "card_number": "Enter a valid card number (13-19 digits)",
        "cardholder_name": "Cardholder name must be at least 3 characters",
        "expiry_date": "Enter valid expiry date (MM/YY), not expired",
        "cvv": "CVV must be 3-4 digits",
    }


def test_last_four() -> None:
    assert VALID_CARD.last_four == "1111"
