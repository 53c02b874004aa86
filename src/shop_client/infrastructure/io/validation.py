"""Pydantic-based validation helpers for inbound API payloads."""

from __future__ import annotations

from pydantic import TypeAdapter, ValidationError

from ...domain.models import AuthSession, CartLineItem, Order, OrderLine, Product, User
from ...io_contracts import (
    AuthResponseInput,
    CartItemInput,
    ErrorBodyInput,
    OrderInput,
    OrderItemInput,
    ProductInput,
    ProfileResponseInput,
    UserInput,
)


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


def validate_as[SchemaT](schema: type[SchemaT], payload: object) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_python(payload)
    except ValidationError as exc:
        message = f"Invalid payload for {schema}."
        raise IncomingDataError(message) from exc


def validate_json_as[SchemaT](schema: type[SchemaT], payload: str | bytes | bytearray) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_json(payload)
    except ValidationError as exc:
        message = f"Invalid JSON payload for {schema}."
        raise IncomingDataError(message) from exc


def _require_id(payload: ProductInput | CartItemInput | UserInput | OrderInput, kind: str) -> int:
    value = payload.get("id")
    if value is None:
        raise IncomingDataError(f"{kind} payload is missing an id.")
    return value


def _product_from_input(payload: ProductInput) -> Product:
    return Product(
        id=_require_id(payload, "Product"),
        name=payload.get("name") or "",
        price=float(payload.get("price") or 0.0),
        image=payload.get("image") or "",
        description=payload.get("description") or "",
        stock_quantity=payload.get("stockQuantity") or 0,
        images=tuple(payload.get("images") or ()),
        sizes=tuple(payload.get("sizes") or ()),
    )


def _user_from_input(payload: UserInput) -> User:
    username = payload.get("username")
    if not username:
        raise IncomingDataError("User payload is missing a username.")
    return User(
        id=_require_id(payload, "User"),
        username=username,
        email=payload.get("email") or "",
        first_name=payload.get("firstName") or "",
        last_name=payload.get("lastName") or "",
        phone=payload.get("phone") or "",
        role=payload.get("role") or "USER",
    )


def _order_line_from_input(payload: OrderItemInput) -> OrderLine:
    product = payload.get("product") or {}
    name = payload.get("productName") or product.get("name") or ""
    price = payload.get("price")
    if price is None:
        price = product.get("price") or 0.0
    return OrderLine(
        product_name=name,
        size=payload.get("size"),
        quantity=payload.get("quantity") or 0,
        price=float(price),
    )


def _order_from_input(payload: OrderInput) -> Order:
    return Order(
        id=_require_id(payload, "Order"),
        order_number=payload.get("orderNumber") or "",
        status=payload.get("status") or "PENDING",
        total_amount=float(payload.get("totalAmount") or 0.0),
        shipping_address=payload.get("shippingAddress") or "",
        phone_number=payload.get("phoneNumber") or "",
        created_at=payload.get("createdAt") or "",
        items=tuple(_order_line_from_input(item) for item in payload.get("items") or ()),
    )


def parse_product(payload: object) -> Product:
    return _product_from_input(validate_as(ProductInput, payload))


def parse_products(payload: object) -> tuple[Product, ...]:
    if payload is None:
        return ()
    items = validate_as(list[ProductInput], payload)
    return tuple(_product_from_input(item) for item in items)


def parse_cart_item(payload: object) -> CartLineItem:
    item = validate_as(CartItemInput, payload)
    product = item.get("product")
    if product is None:
        raise IncomingDataError("Cart item payload is missing its product.")
    quantity = item.get("quantity")
    if quantity is None:
        raise IncomingDataError("Cart item payload is missing a quantity.")
    return CartLineItem(
        id=_require_id(item, "Cart item"),
        product=_product_from_input(product),
        size=item.get("size") or 0,
        quantity=quantity,
    )


def parse_optional_cart_item(payload: object) -> CartLineItem | None:
    """Parse a cart item, treating an empty body as "the server removed it"."""
    if payload is None or payload == "":
        return None
    return parse_cart_item(payload)


def parse_cart(payload: object) -> tuple[CartLineItem, ...]:
    if payload is None:
        return ()
    items = validate_as(list[object], payload)
    return tuple(parse_cart_item(item) for item in items)


def parse_user(payload: object) -> User:
    return _user_from_input(validate_as(UserInput, payload))


def parse_auth_session(payload: object) -> AuthSession:
    response = validate_as(AuthResponseInput, payload)
    user = response.get("user")
    if user is None:
        raise IncomingDataError("Auth payload is missing its user.")
    return AuthSession(user=_user_from_input(user), token=response.get("token") or None)


def parse_profile(payload: object) -> User:
    """Parse `/auth/profile`, which wraps the user in a `user` key."""
    response = validate_as(ProfileResponseInput, payload)
    user = response.get("user")
    if user is None:
        raise IncomingDataError("Profile payload is missing its user.")
    return _user_from_input(user)


def parse_order(payload: object) -> Order:
    return _order_from_input(validate_as(OrderInput, payload))


def parse_orders(payload: object) -> tuple[Order, ...]:
    if payload is None:
        return ()
    items = validate_as(list[OrderInput], payload)
    return tuple(_order_from_input(item) for item in items)


def parse_records(payload: object) -> list[dict[str, object]]:
    """Parse a list of loosely-typed records (admin listings)."""
    if payload is None:
        return []
    return validate_as(list[dict[str, object]], payload)


def parse_record(payload: object) -> dict[str, object]:
    if payload is None:
        return {}
    return validate_as(dict[str, object], payload)


def extract_server_message(payload: object) -> str | None:
    """Pull a human-readable message out of an error body.

    The API answers with either `{"error": "..."}` / `{"message": "..."}` or a bare string.
    """
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    try:
        body = validate_as(ErrorBodyInput, payload)
    except IncomingDataError:
        return None
    message = body.get("error") or body.get("message")
    return message.strip() if message and message.strip() else None
