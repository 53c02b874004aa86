"""Checkout: validate the forms, verify payment, place the order, empty the cart.

Usage example:
    from shop_client.application.checkout import StubPaymentGateway, run_checkout

    result = run_checkout(
        store=store,
        shipping=shipping,
        card=card,
        gateway=StubPaymentGateway(),
    )
    print(result.order.order_number)
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import override

from ..domain.checkout import (
    CardDetails,
    PaymentResult,
    ShippingDetails,
    validate_card,
    validate_shipping,
)
from ..domain.models import Order
from ..exceptions import (
    CheckoutValidationError,
    EmptyCartError,
    OrderPlacementError,
    PaymentDeclinedError,
)
from ..observability import get_logger
from ..protocols import PaymentGateway
from ..store import Store
from ..store.cart import clear_cart
from ..store.orders import OrderPlaced, place_order

logger = get_logger("shop_client.application.checkout")


@dataclass(frozen=True)
class StubPaymentGateway(PaymentGateway):
    """Test-mode gateway: every card is accepted."""

    clock: Callable[[], float] = field(default=time.time)

    @override
    def verify(self, card: CardDetails) -> PaymentResult:
        logger.info("Verifying card ending %s", card.last_four)
        transaction_id = f"TXN-{int(self.clock() * 1000)}"
        return PaymentResult(
            success=True,
            message="Payment processed successfully",
            transaction_id=transaction_id,
        )


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    payment: PaymentResult


def run_checkout(
    *,
    store: Store,
    shipping: ShippingDetails,
    card: CardDetails,
    gateway: PaymentGateway,
    today: date | None = None,
) -> CheckoutResult:
    """Run the checkout flow against the current cart.

    Args:
        store: Store holding the signed-in user's cart.
        shipping: Shipping form values.
        card: Card form values.
        gateway: Payment verification backend.
        today: Date used for the card expiry check (defaults to today).

    Raises:
        CheckoutValidationError: A form field is invalid; nothing is sent.
        EmptyCartError: The cart has no lines; nothing is sent.
        PaymentDeclinedError: The gateway rejected the card.
        OrderPlacementError: The order request failed.
    """
    shipping_errors = validate_shipping(shipping)
    if shipping_errors:
        raise CheckoutValidationError("shipping", shipping_errors)
    card_errors = validate_card(card, today=today or date.today())
    if card_errors:
        raise CheckoutValidationError("payment", card_errors)
    if not store.get_state().cart.items:
        raise EmptyCartError()

    payment = gateway.verify(card)
    if not payment.success:
        raise PaymentDeclinedError(payment.message)
    logger.info("Payment verified, transaction=%s", payment.transaction_id)

    outcome = store.run(
        place_order(shipping_address=shipping.format_address(), phone_number=shipping.phone.strip())
    )
    if not isinstance(outcome, OrderPlaced):
        raise OrderPlacementError(outcome.error)

    store.dispatch(clear_cart())
    logger.info("Order created: %s", outcome.order.order_number)
    return CheckoutResult(order=outcome.order, payment=payment)
