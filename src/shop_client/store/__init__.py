"""State slices and the store that runs their operations."""

from .auth import AuthState
from .cart import CartState
from .context import Thunk, ThunkContext
from .orders import OrdersState
from .products import ProductsState
from .store import Action, RootState, Store, root_reducer

__all__ = [
    "Action",
    "AuthState",
    "CartState",
    "OrdersState",
    "ProductsState",
    "RootState",
    "Store",
    "Thunk",
    "ThunkContext",
    "root_reducer",
]
