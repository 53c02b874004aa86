"""Root state, root reducer and the store that runs thunks against them.

Usage example:
    from shop_client.store import Store
    from shop_client.store.products import fetch_products

    store = Store(api=api, token_store=token_store)
    unsubscribe = store.subscribe(lambda state: print(state.products.loading))
    store.run(fetch_products())
    unsubscribe()
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from ..observability import get_logger
from .auth import AuthAction, AuthState, reduce_auth
from .cart import CartAction, CartState, reduce_cart
from .context import Thunk, ThunkContext
from .orders import OrdersAction, OrdersState, reduce_orders
from .products import ProductsAction, ProductsState, reduce_products

if TYPE_CHECKING:
    from ..api import ShopApi
    from ..protocols import TokenStore

logger = get_logger("shop_client.store")

Action = AuthAction | CartAction | ProductsAction | OrdersAction

type Listener = Callable[[RootState], None]


@dataclass(frozen=True)
class RootState:
    auth: AuthState = field(default_factory=AuthState)
    cart: CartState = field(default_factory=CartState)
    products: ProductsState = field(default_factory=ProductsState)
    orders: OrdersState = field(default_factory=OrdersState)


def root_reducer(state: RootState, action: Action) -> RootState:
    """Route an action to every slice that handles its variant."""
    updated = state
    if isinstance(action, AuthAction):
        updated = replace(updated, auth=reduce_auth(updated.auth, action))
    if isinstance(action, CartAction):
        updated = replace(updated, cart=reduce_cart(updated.cart, action))
    if isinstance(action, ProductsAction):
        updated = replace(updated, products=reduce_products(updated.products, action))
    if isinstance(action, OrdersAction):
        updated = replace(updated, orders=reduce_orders(updated.orders, action))
    return updated


class Store:
    """Holds root state; dispatches are serialised so the last committed action wins."""

    def __init__(
        self,
        *,
        api: ShopApi,
        token_store: TokenStore,
        initial_state: RootState | None = None,
    ) -> None:
        self._api = api
        self._token_store = token_store
        self._state = initial_state or RootState()
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    @property
    def state(self) -> RootState:
        return self.get_state()

    def get_state(self) -> RootState:
        with self._lock:
            return self._state

    def dispatch(self, action: Action) -> Action:
        with self._lock:
            self._state = root_reducer(self._state, action)
            snapshot = self._state
            listeners = tuple(self._listeners)
            logger.debug("Dispatched %s", type(action).__name__)
            for listener in listeners:
                listener(snapshot)
        return action

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def run[T](self, thunk: Thunk[T]) -> T:
        """Run an asynchronous operation on the calling thread."""
        context = ThunkContext(
            dispatch=self.dispatch,
            get_state=self.get_state,
            api=self._api,
            token_store=self._token_store,
        )
        return thunk(context)
