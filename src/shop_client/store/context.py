"""Shared types for slice thunks."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..exceptions import ShopClientError
from ..infrastructure.io.validation import IncomingDataError

if TYPE_CHECKING:
    from ..api import ShopApi
    from ..protocols import TokenStore
    from .store import Action, RootState

# Failures a thunk turns into a rejected action. Anything else is a bug and propagates.
SLICE_ERRORS: tuple[type[Exception], ...] = (ShopClientError, IncomingDataError)


@dataclass(frozen=True)
class ThunkContext:
    """What an asynchronous operation can see and do while it runs."""

    dispatch: Callable[[Action], Action]
    get_state: Callable[[], RootState]
    api: ShopApi
    token_store: TokenStore


type Thunk[T] = Callable[[ThunkContext], T]
