"""Cart slice: server-confirmed cart lines for the signed-in user.

Every mutation waits for the server and commits what it returns. Additions
merge into an existing line with the same product and size; quantity
updates replace the line, or drop it when the server answers with no body.

Usage example:
    from shop_client.store.cart import add_to_cart, increase_quantity

    store.run(add_to_cart(product_id=7, size=42, quantity=1))
    store.run(increase_quantity(store.state.cart.items[0].id))
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, assert_never

from ..domain.models import CartLineItem, cart_total
from ..exceptions import user_message
from ..observability import get_logger
from .auth import LoggedOut
from .context import SLICE_ERRORS, Thunk, ThunkContext

logger = get_logger("shop_client.store.cart")

NOT_SIGNED_IN_MESSAGE = "You must be logged in to add items to the cart"
ITEM_NOT_FOUND_MESSAGE = "Cart item not found"

CartOperation = Literal["fetch", "add", "remove", "update_quantity"]


@dataclass(frozen=True)
class CartState:
    items: tuple[CartLineItem, ...] = field(default_factory=tuple)
    loading: bool = False
    error: str | None = None

    def find(self, item_id: int) -> CartLineItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    @property
    def total(self) -> float:
        return cart_total(self.items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


@dataclass(frozen=True)
class CartPending:
    operation: CartOperation


@dataclass(frozen=True)
class CartFetched:
    items: tuple[CartLineItem, ...]


@dataclass(frozen=True)
class CartItemAdded:
    item: CartLineItem
    quantity_added: int


@dataclass(frozen=True)
class CartItemRemoved:
    item_id: int


@dataclass(frozen=True)
class CartQuantityUpdated:
    item_id: int
    item: CartLineItem | None


@dataclass(frozen=True)
class CartRejected:
    operation: CartOperation
    error: str


@dataclass(frozen=True)
class CartCleared:
    pass


CartAction = (
    CartPending
    | CartFetched
    | CartItemAdded
    | CartItemRemoved
    | CartQuantityUpdated
    | CartRejected
    | CartCleared
    | LoggedOut
)


def _merge_added(
    items: tuple[CartLineItem, ...], added: CartLineItem, quantity_added: int
) -> tuple[CartLineItem, ...]:
    for index, existing in enumerate(items):
        if existing.id == added.id:
            # The server already merged the line and reports its new total.
            return items[:index] + (added,) + items[index + 1 :]
    for index, existing in enumerate(items):
        if existing.merge_key == added.merge_key:
            merged = replace(existing, quantity=existing.quantity + quantity_added)
            return items[:index] + (merged,) + items[index + 1 :]
    return (added, *items)


def _replace_line(
    items: tuple[CartLineItem, ...], item_id: int, updated: CartLineItem | None
) -> tuple[CartLineItem, ...]:
    if updated is None or updated.quantity < 1:
        return tuple(item for item in items if item.id != item_id)
    return tuple(updated if item.id == item_id else item for item in items)


def reduce_cart(state: CartState, action: CartAction) -> CartState:
    match action:
        case CartPending():
            return replace(state, loading=True, error=None)
        case CartFetched(items=items):
            kept = tuple(item for item in items if item.quantity >= 1)
            return replace(state, items=kept, loading=False, error=None)
        case CartItemAdded(item=item, quantity_added=quantity_added):
            items = _merge_added(state.items, item, quantity_added)
            return replace(state, items=items, loading=False, error=None)
        case CartItemRemoved(item_id=item_id):
            items = tuple(item for item in state.items if item.id != item_id)
            return replace(state, items=items, loading=False, error=None)
        case CartQuantityUpdated(item_id=item_id, item=item):
            items = _replace_line(state.items, item_id, item)
            return replace(state, items=items, loading=False, error=None)
        case CartRejected(error=error):
            return replace(state, loading=False, error=error)
        case CartCleared() | LoggedOut():
            return CartState()
        case _:
            assert_never(action)


def _reject(ctx: ThunkContext, operation: CartOperation, message: str) -> CartRejected:
    rejected = CartRejected(operation, message)
    ctx.dispatch(rejected)
    return rejected


def fetch_cart() -> Thunk[CartFetched | CartRejected]:
    """Load the cart; signed-out users get an empty cart without a request."""

    def thunk(ctx: ThunkContext) -> CartFetched | CartRejected:
        ctx.dispatch(CartPending("fetch"))
        if ctx.get_state().auth.user_id is None:
            logger.info("No authenticated user, returning empty cart")
            fetched = CartFetched(())
            ctx.dispatch(fetched)
            return fetched
        try:
            items = ctx.api.cart.list()
        except SLICE_ERRORS as exc:
            logger.warning("Failed to fetch cart: %s", user_message(exc))
            return _reject(ctx, "fetch", user_message(exc))
        logger.info("Cart fetched, items=%d", len(items))
        fetched = CartFetched(items)
        ctx.dispatch(fetched)
        return fetched

    return thunk


def add_to_cart(*, product_id: int, size: int, quantity: int = 1) -> Thunk[CartItemAdded | CartRejected]:
    if quantity < 1:
        raise ValueError(f"quantity must be at least 1, got {quantity}")

    def thunk(ctx: ThunkContext) -> CartItemAdded | CartRejected:
        ctx.dispatch(CartPending("add"))
        if ctx.get_state().auth.user_id is None:
            return _reject(ctx, "add", NOT_SIGNED_IN_MESSAGE)
        logger.info("Adding to cart: product=%s size=%s quantity=%s", product_id, size, quantity)
        try:
            item = ctx.api.cart.add(product_id=product_id, size=size, quantity=quantity)
        except SLICE_ERRORS as exc:
            logger.warning("Failed to add item: %s", user_message(exc))
            return _reject(ctx, "add", user_message(exc))
        added = CartItemAdded(item, quantity)
        ctx.dispatch(added)
        return added

    return thunk


def remove_from_cart(item_id: int) -> Thunk[CartItemRemoved | CartRejected]:
    def thunk(ctx: ThunkContext) -> CartItemRemoved | CartRejected:
        ctx.dispatch(CartPending("remove"))
        try:
            ctx.api.cart.remove(item_id)
        except SLICE_ERRORS as exc:
            return _reject(ctx, "remove", user_message(exc))
        removed = CartItemRemoved(item_id)
        ctx.dispatch(removed)
        return removed

    return thunk


def update_quantity(item_id: int, quantity: int) -> Thunk[CartQuantityUpdated | CartRejected]:
    """Set a line's quantity on the server; zero asks the server to remove it."""

    def thunk(ctx: ThunkContext) -> CartQuantityUpdated | CartRejected:
        ctx.dispatch(CartPending("update_quantity"))
        try:
            item = ctx.api.cart.update_quantity(item_id, max(0, quantity))
        except SLICE_ERRORS as exc:
            return _reject(ctx, "update_quantity", user_message(exc))
        updated = CartQuantityUpdated(item_id, item)
        ctx.dispatch(updated)
        return updated

    return thunk


def increase_quantity(item_id: int) -> Thunk[CartQuantityUpdated | CartRejected]:
    def thunk(ctx: ThunkContext) -> CartQuantityUpdated | CartRejected:
        line = ctx.get_state().cart.find(item_id)
        if line is None:
            return _reject(ctx, "update_quantity", ITEM_NOT_FOUND_MESSAGE)
        return update_quantity(item_id, line.quantity + 1)(ctx)

    return thunk


def decrease_quantity(item_id: int) -> Thunk[CartQuantityUpdated | CartRejected]:
    """Step a line down by one.

    Local quantity never goes below 1. Decreasing a line that holds a single
    unit sends 0 so the server removes it, and the reducer drops the line.
    """

    def thunk(ctx: ThunkContext) -> CartQuantityUpdated | CartRejected:
        line = ctx.get_state().cart.find(item_id)
        if line is None:
            return _reject(ctx, "update_quantity", ITEM_NOT_FOUND_MESSAGE)
        return update_quantity(item_id, line.quantity - 1)(ctx)

    return thunk


def clear_cart() -> CartCleared:
    return CartCleared()
