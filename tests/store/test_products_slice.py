"""Tests for the products slice."""

from __future__ import annotations

from shop_client.domain.models import Product
from shop_client.store.products import (
    ProductFetched,
    ProductsFetched,
    ProductsPending,
    ProductsRejected,
    ProductsState,
    fetch_product,
    fetch_products,
    reduce_products,
)
from tests.fakes import InMemoryTokenStore, ScriptedSession, build_test_store, make_response
from tests.support.payloads import product_payload


def test_reduce_products_lifecycle(runner_product: Product) -> None:
    state = reduce_products(ProductsState(error="stale"), ProductsPending("list"))
    assert state.loading is True
    assert state.error is None

    state = reduce_products(state, ProductsFetched((runner_product,)))
    assert state == ProductsState(items=(runner_product,))

    state = reduce_products(state, ProductFetched(runner_product))
    assert state.selected == runner_product
    assert state.items == (runner_product,)


def test_reduce_products_rejection_keeps_items(runner_product: Product) -> None:
    state = ProductsState(items=(runner_product,), loading=True)
    state = reduce_products(state, ProductsRejected("list", "Server down"))
    assert state.items == (runner_product,)
    assert state.loading is False
    assert state.error == "Server down"


def test_fetch_products_without_token_sends_no_auth_header(
    session: ScriptedSession, token_store: InMemoryTokenStore
) -> None:
    session.script(
        "GET",
        "/products",
        make_response(200, [product_payload(7), product_payload(8, name="Trail", price=120.0)]),
    )
    store = build_test_store(session, token_store)

    outcome = store.run(fetch_products())

    assert isinstance(outcome, ProductsFetched)
    assert [product.name for product in store.state.products.items] == ["Runner", "Trail"]
    assert store.state.products.loading is False
    assert session.calls[0].authorization is None


def test_fetch_products_surfaces_final_failure(
    session: ScriptedSession, token_store: InMemoryTokenStore
) -> None:
    session.script("GET", "/products", make_response(503))
    store = build_test_store(session, token_store)

    outcome = store.run(fetch_products())

    assert isinstance(outcome, ProductsRejected)
    assert store.state.products.error == outcome.error
    assert store.state.products.loading is False
    # One original attempt plus three retries.
    assert len(session.calls_to("GET", "/products")) == 4


def test_fetch_product_sets_selection(
    session: ScriptedSession, token_store: InMemoryTokenStore
) -> None:
    session.script("GET", "/products/7", make_response(200, product_payload(7)))
    store = build_test_store(session, token_store)

    store.run(fetch_product(7))

    selected = store.state.products.selected
    assert selected is not None
    assert selected.id == 7
    assert selected.sizes == (40, 41, 42)


def test_fetch_unknown_product_is_rejected(
    session: ScriptedSession, token_store: InMemoryTokenStore
) -> None:
    session.script("GET", "/products/99", make_response(404, {"error": "Product not found"}))
    store = build_test_store(session, token_store)

    outcome = store.run(fetch_product(99))

    assert outcome == ProductsRejected("detail", "Product not found")
    assert store.state.products.selected is None
