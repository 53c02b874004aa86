"""Orders slice: the signed-in user's order history and order placement."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, assert_never

from ..domain.models import Order
from ..exceptions import user_message
from ..observability import get_logger
from .auth import LoggedOut
from .context import SLICE_ERRORS, Thunk, ThunkContext

logger = get_logger("shop_client.store.orders")

NOT_SIGNED_IN_MESSAGE = "You must be logged in to view orders"

OrdersOperation = Literal["history", "place"]


@dataclass(frozen=True)
class OrdersState:
    items: tuple[Order, ...] = field(default_factory=tuple)
    last_placed: Order | None = None
    loading: bool = False
    error: str | None = None


@dataclass(frozen=True)
class OrdersPending:
    operation: OrdersOperation


@dataclass(frozen=True)
class OrdersFetched:
    items: tuple[Order, ...]


@dataclass(frozen=True)
class OrderPlaced:
    order: Order


@dataclass(frozen=True)
class OrdersRejected:
    operation: OrdersOperation
    error: str


OrdersAction = OrdersPending | OrdersFetched | OrderPlaced | OrdersRejected | LoggedOut


def reduce_orders(state: OrdersState, action: OrdersAction) -> OrdersState:
    match action:
        case OrdersPending():
            return replace(state, loading=True, error=None)
        case OrdersFetched(items=items):
            return replace(state, items=items, loading=False, error=None)
        case OrderPlaced(order=order):
            return replace(
                state,
                items=(order, *(item for item in state.items if item.id != order.id)),
                last_placed=order,
                loading=False,
                error=None,
            )
        case OrdersRejected(error=error):
            return replace(state, loading=False, error=error)
        case LoggedOut():
            return OrdersState()
        case _:
            assert_never(action)


def fetch_user_orders() -> Thunk[OrdersFetched | OrdersRejected]:
    def thunk(ctx: ThunkContext) -> OrdersFetched | OrdersRejected:
        ctx.dispatch(OrdersPending("history"))
        user_id = ctx.get_state().auth.user_id
        if user_id is None:
            rejected = OrdersRejected("history", NOT_SIGNED_IN_MESSAGE)
            ctx.dispatch(rejected)
            return rejected
        try:
            items = ctx.api.orders.for_user(user_id)
        except SLICE_ERRORS as exc:
            rejected = OrdersRejected("history", user_message(exc))
            ctx.dispatch(rejected)
            return rejected
        fetched = OrdersFetched(items)
        ctx.dispatch(fetched)
        return fetched

    return thunk


def place_order(*, shipping_address: str, phone_number: str) -> Thunk[OrderPlaced | OrdersRejected]:
    def thunk(ctx: ThunkContext) -> OrderPlaced | OrdersRejected:
        ctx.dispatch(OrdersPending("place"))
        try:
            order = ctx.api.orders.create(shipping_address=shipping_address, phone_number=phone_number)
        except SLICE_ERRORS as exc:
            logger.warning("Order placement failed: %s", user_message(exc))
            rejected = OrdersRejected("place", user_message(exc))
            ctx.dispatch(rejected)
            return rejected
        logger.info("Order placed: %s", order.order_number)
        placed = OrderPlaced(order)
        ctx.dispatch(placed)
        return placed

    return thunk
