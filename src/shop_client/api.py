"""Endpoint groups for the shop API.

Usage example:
    from shop_client.api import ShopApi

    api = ShopApi.from_client(client)
    products = api.products.list()
    line = api.cart.add(product_id=7, size=42, quantity=1)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from .domain.models import AuthSession, CartLineItem, Order, Product, User
from .infrastructure.http import ApiClient
from .infrastructure.io.validation import (
    parse_auth_session,
    parse_cart,
    parse_cart_item,
    parse_optional_cart_item,
    parse_order,
    parse_orders,
    parse_product,
    parse_products,
    parse_profile,
    parse_record,
    parse_records,
    parse_user,
)


@dataclass(frozen=True)
class ProductApi:
    client: ApiClient

    def list(self) -> tuple[Product, ...]:
        return parse_products(self.client.get("/products").data)

    def get(self, product_id: int) -> Product:
        return parse_product(self.client.get(f"/products/{product_id}").data)


@dataclass(frozen=True)
class CartApi:
    client: ApiClient

    def list(self) -> tuple[CartLineItem, ...]:
        return parse_cart(self.client.get("/cart").data)

    def add(self, *, product_id: int, size: int, quantity: int) -> CartLineItem:
        payload = {"productId": product_id, "size": size, "quantity": quantity}
        return parse_cart_item(self.client.post("/cart", json=payload).data)

    def remove(self, item_id: int) -> None:
        self.client.delete(f"/cart/{item_id}")

    def update_quantity(self, item_id: int, quantity: int) -> CartLineItem | None:
        """Set a line's quantity; None means the server removed the line."""
        response = self.client.put(f"/cart/{item_id}/quantity", params={"quantity": quantity})
        return parse_optional_cart_item(response.data)


@dataclass(frozen=True)
class AuthApi:
    client: ApiClient

    def signup(
        self,
        *,
        username: str,
        password: str,
        email: str,
        first_name: str = "",
        last_name: str = "",
        phone: str = "",
    ) -> AuthSession:
        payload = {
            "username": username,
            "password": password,
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "phone": phone,
        }
        return parse_auth_session(self.client.post("/auth/signup", json=payload).data)

    def login(self, *, username: str, password: str) -> AuthSession:
        payload = {"username": username, "password": password}
        return parse_auth_session(self.client.post("/auth/login", json=payload).data)

    def logout(self) -> None:
        self.client.post("/auth/logout")

    def profile(self) -> User:
        return parse_profile(self.client.get("/auth/profile").data)

    def get_user(self, user_id: int) -> User:
        return parse_user(self.client.get(f"/auth/user/{user_id}").data)

    def update_user(self, user_id: int, changes: dict[str, object]) -> User:
        return parse_user(self.client.put(f"/auth/user/{user_id}", json=changes).data)


@dataclass(frozen=True)
class OrderApi:
    client: ApiClient

    def list(self) -> tuple[Order, ...]:
        return parse_orders(self.client.get("/orders").data)

    def get(self, order_id: int) -> Order:
        return parse_order(self.client.get(f"/orders/{order_id}").data)

    def for_user(self, user_id: int) -> tuple[Order, ...]:
        return parse_orders(self.client.get(f"/orders/user/{user_id}").data)

    def create(self, *, shipping_address: str, phone_number: str) -> Order:
        payload = {"shippingAddress": shipping_address, "phoneNumber": phone_number}
        return parse_order(self.client.post("/orders", json=payload).data)

    def update_status(self, order_id: int, status: str) -> Order:
        response = self.client.put(f"/orders/{order_id}/status", params={"status": status})
        return parse_order(response.data)


@dataclass(frozen=True)
class AdminApi:
    client: ApiClient

    def dashboard(self) -> dict[str, object]:
        return parse_record(self.client.get("/admin/dashboard").data)

    def users(self) -> list[dict[str, object]]:
        return parse_records(self.client.get("/admin/users").data)

    def products(self) -> tuple[Product, ...]:
        return parse_products(self.client.get("/admin/products").data)

    def orders(self) -> tuple[Order, ...]:
        return parse_orders(self.client.get("/admin/orders").data)

    def logs(self) -> list[dict[str, object]]:
        return parse_records(self.client.get("/admin/logs").data)

    def create_product(self, product: dict[str, object]) -> Product:
        return parse_product(self.client.post("/admin/products", json=product).data)

    def update_product(self, product_id: int, product: dict[str, object]) -> Product:
        return parse_product(self.client.put(f"/admin/products/{product_id}", json=product).data)

    def delete_product(self, product_id: int) -> None:
        self.client.delete(f"/admin/products/{product_id}")

    def update_order_status(self, order_id: int, status: str) -> Order:
        response = self.client.put(f"/admin/orders/{order_id}/status", params={"status": status})
        return parse_order(response.data)


@dataclass(frozen=True)
class ShopApi:
    """All endpoint groups sharing one ApiClient."""

    client: ApiClient
    products: ProductApi
    cart: CartApi
    auth: AuthApi
    orders: OrderApi
    admin: AdminApi

    @classmethod
    def from_client(cls, client: ApiClient) -> Self:
        return cls(
            client=client,
            products=ProductApi(client),
            cart=CartApi(client),
            auth=AuthApi(client),
            orders=OrderApi(client),
            admin=AdminApi(client),
        )
