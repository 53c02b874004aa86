"""Boundary-neutral IO contracts for API payloads.

The shop API speaks camelCase JSON. These shapes describe what the client
accepts; every key is optional so partial payloads validate and missing
values fall back to defaults during conversion.

Usage example:
    from shop_client.io_contracts import CartItemInput

    payload: CartItemInput = {
        "id": 3,
        "product": {"id": 7, "name": "Runner", "price": 89.99},
        "size": 42,
        "quantity": 1,
    }
"""

from __future__ import annotations

from typing import TypedDict


class ProductInput(TypedDict, total=False):
    id: int
    name: str | None
    price: float | None
    image: str | None
    description: str | None
    stockQuantity: int | None
    images: list[str] | None
    sizes: list[int] | None


class CartItemInput(TypedDict, total=False):
    id: int
    product: ProductInput
    size: int | None
    quantity: int
    userId: int | None


class UserInput(TypedDict, total=False):
    id: int
    username: str
    email: str | None
    firstName: str | None
    lastName: str | None
    phone: str | None
    role: str | None


class AuthResponseInput(TypedDict, total=False):
    user: UserInput
    token: str | None


class ProfileResponseInput(TypedDict, total=False):
    user: UserInput


class OrderItemInput(TypedDict, total=False):
    product: ProductInput | None
    productName: str | None
    size: int | None
    quantity: int | None
    price: float | None


class OrderInput(TypedDict, total=False):
    id: int
    orderNumber: str | None
    status: str | None
    totalAmount: float | None
    shippingAddress: str | None
    phoneNumber: str | None
    createdAt: str | None
    items: list[OrderItemInput] | None


class ErrorBodyInput(TypedDict, total=False):
    error: str | None
    message: str | None
