"""Checkout form rules: shipping and card validation, payment result.

Validation is pure and client-side. Each validator returns a mapping of
field name to message; an empty mapping means the section is valid.

Usage example:
    from shop_client.domain.checkout import ShippingDetails, validate_shipping

    errors = validate_shipping(details)
    if errors:
        ...
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_PATTERN = re.compile(r"^[\d\-()\s]+$")
_ZIP_PATTERN = re.compile(r"^[0-9]{5}(-[0-9]{4})?$")
_CARD_NUMBER_PATTERN = re.compile(r"^\d{13,19}$")
_EXPIRY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/(\d{2})$")
_CVV_PATTERN = re.compile(r"^\d{3,4}$")

MIN_PHONE_DIGITS = 10
MIN_CARDHOLDER_NAME_LENGTH = 3


@dataclass(frozen=True)
class ShippingDetails:
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}"

    def format_address(self) -> str:
        """Single-line address in the form the order endpoint stores."""
        return f"{self.address.strip()}, {self.city.strip()}, {self.state.strip()} {self.zip_code.strip()}"


@dataclass(frozen=True)
class CardDetails:
    card_number: str
    cardholder_name: str
    expiry_date: str
    cvv: str

    @property
    def last_four(self) -> str:
        return re.sub(r"\s+", "", self.card_number)[-4:]


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    message: str
    transaction_id: str | None = None


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_PATTERN.match(value))


def is_valid_phone(value: str) -> bool:
    digits = re.sub(r"\D", "", value)
    return bool(_PHONE_PATTERN.match(value)) and len(digits) >= MIN_PHONE_DIGITS


def is_valid_zip_code(value: str) -> bool:
    return bool(_ZIP_PATTERN.match(value))


def is_valid_card_number(value: str) -> bool:
    return bool(_CARD_NUMBER_PATTERN.match(re.sub(r"\s+", "", value)))


def is_valid_expiry(value: str, *, today: date) -> bool:
    """MM/YY, accepted through the end of the stated month."""
    match = _EXPIRY_PATTERN.match(value)
    if match is None:
        return False
    month = int(match.group(1))
    year = int(match.group(2))
    current_year = today.year % 100
    return year > current_year or (year == current_year and month >= today.month)


def is_valid_cvv(value: str) -> bool:
    return bool(_CVV_PATTERN.match(value))


def validate_shipping(details: ShippingDetails) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not details.first_name.strip():
        errors["first_name"] = "First name is required"
    if not details.last_name.strip():
        errors["last_name"] = "Last name is required"
    if not details.email.strip():
        errors["email"] = "Email is required"
    elif not is_valid_email(details.email.strip()):
        errors["email"] = "Please enter a valid email"
    if not details.phone.strip():
        errors["phone"] = "Phone number is required"
    elif not is_valid_phone(details.phone):
        errors["phone"] = "Please enter a valid 10-digit phone number"
    if not details.address.strip():
        errors["address"] = "Address is required"
    if not details.city.strip():
        errors["city"] = "City is required"
    if not details.state.strip():
        errors["state"] = "State is required"
    if not details.zip_code.strip():
        errors["zip_code"] = "ZIP code is required"
    elif not is_valid_zip_code(details.zip_code.strip()):
        errors["zip_code"] = "Please enter a valid ZIP code (e.g., 12345 or 12345-6789)"
    return errors


def validate_card(card: CardDetails, *, today: date) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not card.card_number.strip():
        errors["card_number"] = "Card number is required"
    elif not is_valid_card_number(card.card_number):
        errors["card_number"] = "Enter a valid card number (13-19 digits)"
    name = card.cardholder_name.strip()
    if not name:
        errors["cardholder_name"] = "Cardholder name is required"
    elif len(name) < MIN_CARDHOLDER_NAME_LENGTH:
        errors["cardholder_name"] = "Cardholder name must be at least 3 characters"
    if not card.expiry_date.strip():
        errors["expiry_date"] = "Expiry date is required"
    elif not is_valid_expiry(card.expiry_date.strip(), today=today):
        errors["expiry_date"] = "Enter valid expiry date (MM/YY), not expired"
    if not card.cvv.strip():
        errors["cvv"] = "CVV is required"
    elif not is_valid_cvv(card.cvv.strip()):
        errors["cvv"] = "CVV must be 3-4 digits"
    return errors
