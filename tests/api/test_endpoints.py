"""Tests for endpoint request shapes."""

from __future__ import annotations

import pytest

from shop_client.api import ShopApi
from tests.fakes import InMemoryTokenStore, ScriptedSession, build_test_client, make_response
from tests.support.payloads import cart_item_payload, order_payload


@pytest.fixture
def api(session: ScriptedSession, token_store: InMemoryTokenStore) -> ShopApi:
    token_store.set("tok-123")
    return ShopApi.from_client(build_test_client(session, token_store))


def test_order_status_update_sends_status_as_query(session: ScriptedSession, api: ShopApi) -> None:
    session.script("PUT", "/orders/11/status", make_response(200, order_payload(11)))

    order = api.orders.update_status(11, "SHIPPED")

    (call,) = session.calls
    assert call.params == {"status": "SHIPPED"}
    assert call.json is None
    assert order.id == 11


def test_admin_order_status_update_sends_status_as_query(
    session: ScriptedSession, api: ShopApi
) -> None:
    session.script("PUT", "/admin/orders/11/status", make_response(200, order_payload(11)))

    api.admin.update_order_status(11, "DELIVERED")

    assert session.calls[0].params == {"status": "DELIVERED"}
    assert session.calls[0].json is None


def test_cart_quantity_update_sends_quantity_as_query(
    session: ScriptedSession, api: ShopApi
) -> None:
    session.script("PUT", "/cart/3/quantity", make_response(200, None))

    assert api.cart.update_quantity(3, 0) is None
    assert session.calls[0].params == {"quantity": 0}


def test_add_to_cart_sends_camel_case_body(session: ScriptedSession, api: ShopApi) -> None:
    session.script("POST", "/cart", make_response(200, cart_item_payload(3)))

    api.cart.add(product_id=7, size=42, quantity=1)

    assert session.calls[0].json == {"productId": 7, "size": 42, "quantity": 1}
