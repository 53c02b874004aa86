"""Tests for the cart slice reducer and thunks."""

from __future__ import annotations

import pytest
import requests

from shop_client.api import ShopApi
from shop_client.domain.models import Product, User
from shop_client.infrastructure.http import ApiResponse, RequestContext
from shop_client.store import RootState, Store
from shop_client.store.auth import AuthState, LoggedOut
from shop_client.store.cart import (
    ITEM_NOT_FOUND_MESSAGE,
    NOT_SIGNED_IN_MESSAGE,
    CartCleared,
    CartFetched,
    CartItemAdded,
    CartItemRemoved,
    CartPending,
    CartQuantityUpdated,
    CartRejected,
    CartState,
    add_to_cart,
    clear_cart,
    decrease_quantity,
    fetch_cart,
    increase_quantity,
    reduce_cart,
    remove_from_cart,
    update_quantity,
)
from tests.fakes import (
    InMemoryTokenStore,
    RecordingSleeper,
    ScriptedSession,
    build_test_client,
    build_test_store,
    make_response,
)
from tests.support.payloads import cart_item_payload, cart_line


def _signed_in_state(user: User, cart: CartState | None = None) -> RootState:
    return RootState(
        auth=AuthState(user=user, is_authenticated=True),
        cart=cart or CartState(),
    )


class TestReduceCart:
    """Pure reducer behaviour."""

    def test_pending_sets_loading_and_clears_error(self) -> None:
        state = reduce_cart(CartState(error="old"), CartPending("fetch"))
        assert state.loading is True
        assert state.error is None

    def test_fetched_sets_items_and_clears_loading(self, runner_product: Product) -> None:
        items = (cart_line(1, runner_product),)
        state = reduce_cart(CartState(loading=True), CartFetched(items))
        assert state.items == items
        assert state.loading is False
        assert state.error is None

    def test_rejected_sets_error_and_clears_loading(self) -> None:
        state = reduce_cart(CartState(loading=True), CartRejected("fetch", "Server down"))
        assert state.error == "Server down"
        assert state.loading is False

    def test_add_new_line_is_prepended(self, runner_product: Product) -> None:
        existing = cart_line(1, runner_product, size=40)
        added = cart_line(2, runner_product, size=42)

        state = reduce_cart(CartState(items=(existing,)), CartItemAdded(added, 1))

        assert [item.id for item in state.items] == [2, 1]

    @pytest.mark.parametrize("quantities", [[1], [1, 1], [2, 3, 1], [5, 1, 1, 1]])
    def test_adds_with_same_key_sum_into_one_line(
        self, runner_product: Product, quantities: list[int]
    ) -> None:
        state = CartState()
        for index, quantity in enumerate(quantities):
            added = cart_line(100 + index, runner_product, size=42, quantity=quantity)
            state = reduce_cart(state, CartItemAdded(added, quantity))

        assert len(state.items) == 1
        assert state.items[0].quantity == sum(quantities)

    def test_add_with_known_id_takes_server_quantity(self, runner_product: Product) -> None:
        state = CartState(items=(cart_line(1, runner_product, quantity=2),))
        server_line = cart_line(1, runner_product, quantity=3)

        state = reduce_cart(state, CartItemAdded(server_line, 1))

        assert state.items == (server_line,)

    def test_quantity_update_replaces_line(self, runner_product: Product) -> None:
        state = CartState(items=(cart_line(1, runner_product, quantity=2),))
        updated = cart_line(1, runner_product, quantity=3)

        state = reduce_cart(state, CartQuantityUpdated(1, updated))

        assert state.items == (updated,)

    def test_quantity_update_without_content_removes_line(self, runner_product: Product) -> None:
        state = CartState(items=(cart_line(1, runner_product), cart_line(2, runner_product, size=40)))
        state = reduce_cart(state, CartQuantityUpdated(1, None))
        assert [item.id for item in state.items] == [2]

    def test_quantity_update_to_zero_never_stores_zero(self, runner_product: Product) -> None:
        state = CartState(items=(cart_line(1, runner_product),))
        state = reduce_cart(state, CartQuantityUpdated(1, cart_line(1, runner_product, quantity=0)))
        assert state.items == ()

    def test_removed_line_is_dropped(self, runner_product: Product) -> None:
        state = CartState(items=(cart_line(1, runner_product),))
        assert reduce_cart(state, CartItemRemoved(1)).items == ()

    @pytest.mark.parametrize("action", [LoggedOut(), CartCleared()])
    def test_logout_and_clear_reset_everything(
        self, runner_product: Product, action: LoggedOut | CartCleared
    ) -> None:
        state = CartState(items=(cart_line(1, runner_product),), loading=True, error="x")
        assert reduce_cart(state, action) == CartState()


class TestCartThunks:
    def test_fetch_without_user_returns_empty_cart_without_network(
        self, session: ScriptedSession, token_store: InMemoryTokenStore
    ) -> None:
        store = build_test_store(session, token_store)

        outcome = store.run(fetch_cart())

        assert outcome == CartFetched(())
        assert store.state.cart == CartState()
        assert session.calls == []

    def test_add_without_user_is_rejected_without_network(
        self, session: ScriptedSession, token_store: InMemoryTokenStore
    ) -> None:
        store = build_test_store(session, token_store)

        outcome = store.run(add_to_cart(product_id=7, size=42, quantity=1))

        assert outcome == CartRejected("add", NOT_SIGNED_IN_MESSAGE)
        assert store.state.cart.error == NOT_SIGNED_IN_MESSAGE
        assert store.state.cart.loading is False
        assert session.calls == []

    def test_add_rejects_non_positive_quantity(self) -> None:
        with pytest.raises(ValueError):
            add_to_cart(product_id=7, size=42, quantity=0)

    def test_fetch_tracks_loading_then_items(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
    ) -> None:
        token_store.set("abc123")
        session.script("GET", "/cart", make_response(200, [cart_item_payload(3, quantity=2)]))
        store = build_test_store(
            session, token_store, initial_state=_signed_in_state(signed_in_user)
        )
        snapshots: list[CartState] = []
        store.subscribe(lambda state: snapshots.append(state.cart))

        store.run(fetch_cart())

        assert [snapshot.loading for snapshot in snapshots] == [True, False]
        assert store.state.cart.error is None
        assert [(item.id, item.quantity) for item in store.state.cart.items] == [(3, 2)]

    def test_fetch_failure_sets_server_message(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
    ) -> None:
        session.script("GET", "/cart", make_response(400, {"error": "Cart unavailable"}))
        store = build_test_store(
            session, token_store, initial_state=_signed_in_state(signed_in_user)
        )

        store.run(fetch_cart())

        assert store.state.cart.error == "Cart unavailable"
        assert store.state.cart.loading is False

    def test_repeated_adds_accumulate_on_one_line(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
    ) -> None:
        session.script(
            "POST",
            "/cart",
            make_response(200, cart_item_payload(3, quantity=1)),
            make_response(200, cart_item_payload(3, quantity=3)),
            make_response(200, cart_item_payload(3, quantity=4)),
        )
        store = build_test_store(
            session, token_store, initial_state=_signed_in_state(signed_in_user)
        )

        for quantity in (1, 2, 1):
            store.run(add_to_cart(product_id=7, size=42, quantity=quantity))

        (line,) = store.state.cart.items
        assert line.quantity == 4
        assert [call.json for call in session.calls] == [
            {"productId": 7, "size": 42, "quantity": 1},
            {"productId": 7, "size": 42, "quantity": 2},
            {"productId": 7, "size": 42, "quantity": 1},
        ]

    def test_increase_sends_quantity_plus_one(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
        runner_product: Product,
    ) -> None:
        session.script("PUT", "/cart/3/quantity", make_response(200, cart_item_payload(3, quantity=3)))
        initial = _signed_in_state(
            signed_in_user, CartState(items=(cart_line(3, runner_product, quantity=2),))
        )
        store = build_test_store(session, token_store, initial_state=initial)

        store.run(increase_quantity(3))

        assert session.calls[0].params == {"quantity": 3}
        assert store.state.cart.items[0].quantity == 3

    def test_decrease_sends_quantity_minus_one(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
        runner_product: Product,
    ) -> None:
        session.script("PUT", "/cart/3/quantity", make_response(200, cart_item_payload(3, quantity=1)))
        initial = _signed_in_state(
            signed_in_user, CartState(items=(cart_line(3, runner_product, quantity=2),))
        )
        store = build_test_store(session, token_store, initial_state=initial)

        store.run(decrease_quantity(3))

        assert session.calls[0].params == {"quantity": 1}
        assert store.state.cart.items[0].quantity == 1

    def test_decrease_from_one_removes_line_via_server(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
        runner_product: Product,
    ) -> None:
        session.script("PUT", "/cart/3/quantity", make_response(200))
        initial = _signed_in_state(
            signed_in_user, CartState(items=(cart_line(3, runner_product, quantity=1),))
        )
        store = build_test_store(session, token_store, initial_state=initial)
        observed: list[int] = []
        store.subscribe(
            lambda state: observed.extend(item.quantity for item in state.cart.items)
        )

        outcome = store.run(decrease_quantity(3))

        assert outcome == CartQuantityUpdated(3, None)
        assert session.calls[0].params == {"quantity": 0}
        assert store.state.cart.items == ()
        assert all(quantity >= 1 for quantity in observed)

    @pytest.mark.parametrize("thunk", [increase_quantity(99), decrease_quantity(99)])
    def test_unknown_line_is_rejected(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
        thunk: object,
    ) -> None:
        store = build_test_store(
            session, token_store, initial_state=_signed_in_state(signed_in_user)
        )

        store.run(thunk)  # type: ignore[arg-type]

        assert store.state.cart.error == ITEM_NOT_FOUND_MESSAGE
        assert session.calls == []

    def test_update_quantity_sets_explicit_value(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
        runner_product: Product,
    ) -> None:
        session.script("PUT", "/cart/3/quantity", make_response(200, cart_item_payload(3, quantity=5)))
        initial = _signed_in_state(
            signed_in_user, CartState(items=(cart_line(3, runner_product, quantity=1),))
        )
        store = build_test_store(session, token_store, initial_state=initial)

        store.run(update_quantity(3, 5))

        assert store.state.cart.items[0].quantity == 5

    def test_remove_drops_line(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
        runner_product: Product,
    ) -> None:
        session.script("DELETE", "/cart/3", make_response(204))
        initial = _signed_in_state(
            signed_in_user, CartState(items=(cart_line(3, runner_product),))
        )
        store = build_test_store(session, token_store, initial_state=initial)

        store.run(remove_from_cart(3))

        assert store.state.cart.items == ()

    def test_clear_cart_empties_state(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        signed_in_user: User,
        runner_product: Product,
    ) -> None:
        initial = _signed_in_state(
            signed_in_user, CartState(items=(cart_line(3, runner_product),))
        )
        store = build_test_store(session, token_store, initial_state=initial)

        store.dispatch(clear_cart())

        assert store.state.cart == CartState()

    def test_add_survives_two_timeouts(
        self,
        session: ScriptedSession,
        token_store: InMemoryTokenStore,
        sleeper: RecordingSleeper,
        signed_in_user: User,
    ) -> None:
        token_store.set("abc123")
        session.script(
            "POST",
            "/cart",
            requests.Timeout("first"),
            requests.Timeout("second"),
            make_response(200, cart_item_payload(3, quantity=1)),
        )
        client = build_test_client(session, token_store, sleeper=sleeper)
        retry_counts: list[int | None] = []
        send = client.request

        def recording_request(context: RequestContext | None) -> ApiResponse:
            response = send(context)
            retry_counts.append(response.context.retry_count)
            return response

        client.request = recording_request  # type: ignore[method-assign]
        store = Store(
            api=ShopApi.from_client(client),
            token_store=token_store,
            initial_state=_signed_in_state(signed_in_user),
        )

        outcome = store.run(add_to_cart(product_id=7, size=42, quantity=1))

        assert isinstance(outcome, CartItemAdded)
        assert retry_counts == [2]
        assert len(session.calls) == 3
        assert len(sleeper.delays) == 2
        assert store.state.cart.loading is False
        assert store.state.cart.error is None
        assert [item.id for item in store.state.cart.items] == [3]
