"""CLI for the shop client.

Commands:
- products / product: Browse the catalogue
- login / signup / logout / whoami: Manage the signed-in session
- cart / add / increase / decrease / remove: Work with the cart
- orders / checkout: Order history and checkout
- admin-dashboard: Admin overview (admin accounts only)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, NoReturn, Protocol

import typer
from rich import print as rprint

from .api import ShopApi
from .application.admin import load_admin_overview
from .application.checkout import run_checkout
from .config import ClientConfig, NonNegativeNumberEnvVarError, PositiveNumberEnvVarError
from .config_file import load_client_config_file
from .domain.checkout import CardDetails, ShippingDetails
from .domain.models import CartLineItem
from .exceptions import CheckoutValidationError, ShopClientError, user_message
from .protocols import PaymentGateway, TokenStore
from .store import Store
from .store.auth import AuthFulfilled, login_user, logout, restore_session, signup_user
from .store.cart import (
    CartRejected,
    add_to_cart,
    decrease_quantity,
    fetch_cart,
    increase_quantity,
    remove_from_cart,
)
from .store.context import SLICE_ERRORS
from .store.orders import OrdersRejected, fetch_user_orders
from .store.products import ProductsRejected, fetch_product, fetch_products


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, config: ClientConfig) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    api: ShopApi
    token_store: TokenStore
    store: Store
    payment_gateway: PaymentGateway


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: ClientConfig
    deps_builder: DependenciesBuilder

    def build_dependencies(self) -> CliDependencies:
        """Return dependencies using the configured builder."""
        return self.deps_builder(config=self.config)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the shop entry point.")


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


def _fail(message: str) -> NoReturn:
    rprint(f"[red]✗ {message}[/red]")
    raise typer.Exit(code=1)


def _signed_in(state: CliContext) -> CliDependencies:
    """Build dependencies and restore the stored session, or stop with an error."""
    deps = state.build_dependencies()
    deps.store.run(restore_session())
    if not deps.store.get_state().auth.is_authenticated:
        _fail("Please login first.")
    return deps


def _print_cart(items: tuple[CartLineItem, ...], total: float) -> None:
    if not items:
        rprint("[yellow]Your cart is empty[/yellow]")
        return
    for item in items:
        rprint(
            f"  #{item.id} {item.product.name} (size {item.size}) "
            f"× {item.quantity}  ${item.line_total:.2f}"
        )
    rprint(f"[bold]Total: ${total:.2f}[/bold]")


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Shop client: browse products, manage the cart and place orders",
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        api_base: Annotated[
            str | None,
            typer.Option("--api-base", help="API base URL (overrides config file and env)"),
        ] = None,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to a TOML config file"),
        ] = None,
    ) -> None:
        """Initialise CLI context."""
        try:
            config = ClientConfig.from_env()
            if config_path is not None:
                config = config.with_file_overrides(load_client_config_file(config_path))
        except (ShopClientError, PositiveNumberEnvVarError, NonNegativeNumberEnvVarError) as exc:
            _fail(str(exc))
        config = config.with_overrides(api_base=api_base)
        ctx.obj = CliContext(config=config, deps_builder=deps_builder)

    @app.command(name="products")
    def list_products(ctx: typer.Context) -> None:
        """List the product catalogue."""
        store = _get_context(ctx).build_dependencies().store
        outcome = store.run(fetch_products())
        if isinstance(outcome, ProductsRejected):
            _fail(outcome.error)
        for product in outcome.items:
            rprint(f"  #{product.id} [bold]{product.name}[/bold]  ${product.price:.2f}")
        rprint(f"[green]✓ {len(outcome.items)} products[/green]")

    @app.command(name="product")
    def show_product(
        ctx: typer.Context,
        product_id: Annotated[int, typer.Argument(help="Product id")],
    ) -> None:
        """Show one product."""
        store = _get_context(ctx).build_dependencies().store
        outcome = store.run(fetch_product(product_id))
        if isinstance(outcome, ProductsRejected):
            _fail(outcome.error)
        product = outcome.product
        rprint(f"[bold]{product.name}[/bold]  ${product.price:.2f}")
        if product.description:
            rprint(f"  {product.description}")
        if product.sizes:
            rprint(f"  Sizes: {', '.join(str(size) for size in product.sizes)}")
        rprint(f"  In stock: {product.stock_quantity}")

    @app.command()
    def login(
        ctx: typer.Context,
        username: Annotated[str, typer.Option("--username", "-u", prompt=True)],
        password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True)],
    ) -> None:
        """Sign in and store the session token."""
        store = _get_context(ctx).build_dependencies().store
        outcome = store.run(login_user(username=username, password=password))
        if not isinstance(outcome, AuthFulfilled):
            _fail(outcome.error)
        rprint(f"[green]✓ Signed in as {outcome.user.username}[/green]")

    @app.command()
    def signup(
        ctx: typer.Context,
        username: Annotated[str, typer.Option("--username", "-u", prompt=True)],
        email: Annotated[str, typer.Option("--email", "-e", prompt=True)],
        password: Annotated[
            str,
            typer.Option("--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True),
        ],
        first_name: Annotated[str, typer.Option("--first-name")] = "",
        last_name: Annotated[str, typer.Option("--last-name")] = "",
        phone: Annotated[str, typer.Option("--phone")] = "",
    ) -> None:
        """Create an account and sign in."""
        store = _get_context(ctx).build_dependencies().store
        outcome = store.run(
            signup_user(
                username=username,
                password=password,
                email=email,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
            )
        )
        if not isinstance(outcome, AuthFulfilled):
            _fail(outcome.error)
        rprint(f"[green]✓ Account created for {outcome.user.username}[/green]")

    @app.command(name="logout")
    def logout_command(ctx: typer.Context) -> None:
        """Sign out and discard the stored token."""
        store = _get_context(ctx).build_dependencies().store
        store.run(logout())
        rprint("[green]✓ Signed out[/green]")

    @app.command()
    def whoami(ctx: typer.Context) -> None:
        """Show the signed-in account."""
        user = _signed_in(_get_context(ctx)).store.get_state().auth.user
        if user is None:
            _fail("Please login first.")
        rprint(f"[bold]{user.username}[/bold] <{user.email}> role={user.role}")

    @app.command()
    def cart(ctx: typer.Context) -> None:
        """Show the cart."""
        store = _signed_in(_get_context(ctx)).store
        outcome = store.run(fetch_cart())
        if isinstance(outcome, CartRejected):
            _fail(outcome.error)
        cart_state = store.get_state().cart
        _print_cart(cart_state.items, cart_state.total)

    @app.command()
    def add(
        ctx: typer.Context,
        product_id: Annotated[int, typer.Argument(help="Product id")],
        size: Annotated[int, typer.Option("--size", "-s", help="Shoe size")],
        quantity: Annotated[int, typer.Option("--quantity", "-q", min=1)] = 1,
    ) -> None:
        """Add a product to the cart."""
        store = _signed_in(_get_context(ctx)).store
        store.run(fetch_cart())
        outcome = store.run(add_to_cart(product_id=product_id, size=size, quantity=quantity))
        if isinstance(outcome, CartRejected):
            _fail(outcome.error)
        rprint(f"[green]✓ Added {outcome.item.product.name} (size {size})[/green]")
        cart_state = store.get_state().cart
        _print_cart(cart_state.items, cart_state.total)

    @app.command()
    def increase(
        ctx: typer.Context,
        item_id: Annotated[int, typer.Argument(help="Cart line id")],
    ) -> None:
        """Increase a cart line's quantity by one."""
        store = _signed_in(_get_context(ctx)).store
        store.run(fetch_cart())
        outcome = store.run(increase_quantity(item_id))
        if isinstance(outcome, CartRejected):
            _fail(outcome.error)
        cart_state = store.get_state().cart
        _print_cart(cart_state.items, cart_state.total)

    @app.command()
    def decrease(
        ctx: typer.Context,
        item_id: Annotated[int, typer.Argument(help="Cart line id")],
    ) -> None:
        """Decrease a cart line's quantity by one (removes a single-unit line)."""
        store = _signed_in(_get_context(ctx)).store
        store.run(fetch_cart())
        outcome = store.run(decrease_quantity(item_id))
        if isinstance(outcome, CartRejected):
            _fail(outcome.error)
        cart_state = store.get_state().cart
        _print_cart(cart_state.items, cart_state.total)

    @app.command()
    def remove(
        ctx: typer.Context,
        item_id: Annotated[int, typer.Argument(help="Cart line id")],
    ) -> None:
        """Remove a line from the cart."""
        store = _signed_in(_get_context(ctx)).store
        store.run(fetch_cart())
        outcome = store.run(remove_from_cart(item_id))
        if isinstance(outcome, CartRejected):
            _fail(outcome.error)
        rprint(f"[green]✓ Removed cart line #{item_id}[/green]")

    @app.command()
    def orders(ctx: typer.Context) -> None:
        """List the signed-in user's orders."""
        store = _signed_in(_get_context(ctx)).store
        outcome = store.run(fetch_user_orders())
        if isinstance(outcome, OrdersRejected):
            _fail(outcome.error)
        if not outcome.items:
            rprint("[yellow]No orders yet[/yellow]")
        for order in outcome.items:
            rprint(f"  {order.order_number}  {order.status}  ${order.total_amount:.2f}")

    @app.command()
    def checkout(
        ctx: typer.Context,
        first_name: Annotated[str, typer.Option("--first-name", prompt=True)],
        last_name: Annotated[str, typer.Option("--last-name", prompt=True)],
        email: Annotated[str, typer.Option("--email", prompt=True)],
        phone: Annotated[str, typer.Option("--phone", prompt=True)],
        address: Annotated[str, typer.Option("--address", prompt=True)],
        city: Annotated[str, typer.Option("--city", prompt=True)],
        state: Annotated[str, typer.Option("--state", prompt=True)],
        zip_code: Annotated[str, typer.Option("--zip", prompt=True)],
        card_number: Annotated[str, typer.Option("--card-number", prompt=True)],
        cardholder_name: Annotated[str, typer.Option("--cardholder-name", prompt=True)],
        expiry_date: Annotated[str, typer.Option("--expiry", prompt="Expiry (MM/YY)")],
        cvv: Annotated[str, typer.Option("--cvv", prompt=True, hide_input=True)],
    ) -> None:
        """Pay for the cart and place an order."""
        deps = _signed_in(_get_context(ctx))
        store = deps.store
        outcome = store.run(fetch_cart())
        if isinstance(outcome, CartRejected):
            _fail(outcome.error)
        shipping = ShippingDetails(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
        )
        card = CardDetails(
            card_number=card_number,
            cardholder_name=cardholder_name,
            expiry_date=expiry_date,
            cvv=cvv,
        )
        try:
            result = run_checkout(
                store=store, shipping=shipping, card=card, gateway=deps.payment_gateway
            )
        except CheckoutValidationError as exc:
            for name, message in exc.field_errors.items():
                rprint(f"  [red]{name}: {message}[/red]")
            _fail(str(exc))
        except ShopClientError as exc:
            _fail(user_message(exc))
        order = result.order
        rprint(f"[green]✓ Order #{order.order_number} has been placed![/green]")
        rprint(f"  Total: ${order.total_amount:.2f}")
        rprint(f"  Transaction: {result.payment.transaction_id}")

    @app.command(name="admin-dashboard")
    def admin_dashboard(ctx: typer.Context) -> None:
        """Show the admin overview."""
        deps = _signed_in(_get_context(ctx))
        user = deps.store.get_state().auth.user
        if user is None or not user.is_admin:
            _fail("Admin access required.")
        try:
            overview = load_admin_overview(deps.api.admin)
        except SLICE_ERRORS as exc:
            _fail(user_message(exc))
        rprint("[bold]Dashboard[/bold]")
        for key, value in overview.dashboard.items():
            rprint(f"  {key}: {value}")
        rprint(f"  Products: {len(overview.products)}")
        rprint(f"  Users: {len(overview.users)}")
        rprint(f"  Orders: {len(overview.orders)}")
        rprint(f"  Log entries: {len(overview.logs)}")

    _ = (
        main,
        list_products,
        show_product,
        login,
        signup,
        logout_command,
        whoami,
        cart,
        add,
        increase,
        decrease,
        remove,
        orders,
        checkout,
        admin_dashboard,
    )

    return app
