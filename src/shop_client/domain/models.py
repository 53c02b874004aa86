"""Domain models for catalogue, cart, account and order data.

Usage example:
    from shop_client.domain.models import CartLineItem, Product

    product = Product(id=7, name="Runner", price=89.99)
    line = CartLineItem(id=1, product=product, size=42, quantity=2)
    assert line.merge_key == (7, 42)
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Product:
    """A catalogue product."""

    id: int
    name: str
    price: float
    image: str = ""
    description: str = ""
    stock_quantity: int = 0
    images: tuple[str, ...] = field(default_factory=tuple)
    sizes: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CartLineItem:
    """A product/size pairing in the cart.

    Quantity is at least 1 while the line is present; a line whose quantity
    would reach zero is removed instead.
    """

    id: int
    product: Product
    size: int
    quantity: int

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def merge_key(self) -> tuple[int, int]:
        return (self.product.id, self.size)

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class User:
    """An account as returned by the auth endpoints."""

    id: int
    username: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    role: str = "USER"

    @property
    def is_admin(self) -> bool:
        return self.role.upper() == "ADMIN"


@dataclass(frozen=True)
class AuthSession:
    """Result of login/signup: the signed-in user and their bearer token."""

    user: User
    token: str | None = None


@dataclass(frozen=True)
class OrderLine:
    """A purchased product line within an order."""

    product_name: str
    size: int | None
    quantity: int
    price: float


@dataclass(frozen=True)
class Order:
    """A placed order."""

    id: int
    order_number: str
    status: str
    total_amount: float
    shipping_address: str = ""
    phone_number: str = ""
    created_at: str = ""
    items: tuple[OrderLine, ...] = field(default_factory=tuple)


def cart_total(items: tuple[CartLineItem, ...]) -> float:
    """Sum of line totals, rounded to cents."""
    return round(sum(item.line_total for item in items), 2)
