"""Products slice: the catalogue listing and the currently viewed product."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, assert_never

from ..domain.models import Product
from ..exceptions import user_message
from ..observability import get_logger
from .context import SLICE_ERRORS, Thunk, ThunkContext

logger = get_logger("shop_client.store.products")

ProductsOperation = Literal["list", "detail"]


@dataclass(frozen=True)
class ProductsState:
    items: tuple[Product, ...] = field(default_factory=tuple)
    selected: Product | None = None
    loading: bool = False
    error: str | None = None


@dataclass(frozen=True)
class ProductsPending:
    operation: ProductsOperation


@dataclass(frozen=True)
class ProductsFetched:
    items: tuple[Product, ...]


@dataclass(frozen=True)
class ProductFetched:
    product: Product


@dataclass(frozen=True)
class ProductsRejected:
    operation: ProductsOperation
    error: str


ProductsAction = ProductsPending | ProductsFetched | ProductFetched | ProductsRejected


def reduce_products(state: ProductsState, action: ProductsAction) -> ProductsState:
    match action:
        case ProductsPending():
            return replace(state, loading=True, error=None)
        case ProductsFetched(items=items):
            return replace(state, items=items, loading=False, error=None)
        case ProductFetched(product=product):
            return replace(state, selected=product, loading=False, error=None)
        case ProductsRejected(error=error):
            return replace(state, loading=False, error=error)
        case _:
            assert_never(action)


def fetch_products() -> Thunk[ProductsFetched | ProductsRejected]:
    def thunk(ctx: ThunkContext) -> ProductsFetched | ProductsRejected:
        ctx.dispatch(ProductsPending("list"))
        logger.info("Product fetch started")
        try:
            items = ctx.api.products.list()
        except SLICE_ERRORS as exc:
            logger.warning("Product fetch failed: %s", user_message(exc))
            rejected = ProductsRejected("list", user_message(exc))
            ctx.dispatch(rejected)
            return rejected
        logger.info("Product fetch succeeded, count=%d", len(items))
        fetched = ProductsFetched(items)
        ctx.dispatch(fetched)
        return fetched

    return thunk


def fetch_product(product_id: int) -> Thunk[ProductFetched | ProductsRejected]:
    def thunk(ctx: ThunkContext) -> ProductFetched | ProductsRejected:
        ctx.dispatch(ProductsPending("detail"))
        try:
            product = ctx.api.products.get(product_id)
        except SLICE_ERRORS as exc:
            rejected = ProductsRejected("detail", user_message(exc))
            ctx.dispatch(rejected)
            return rejected
        fetched = ProductFetched(product)
        ctx.dispatch(fetched)
        return fetched

    return thunk
