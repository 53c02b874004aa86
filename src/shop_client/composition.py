"""Composition root for wiring CLI dependencies."""

from __future__ import annotations

from pathlib import Path

from .api import ShopApi
from .application.checkout import StubPaymentGateway
from .cli import CliDependencies, create_app
from .config import ClientConfig
from .infrastructure import FileTokenStore, build_api_client
from .store import Store


def build_cli_dependencies(*, config: ClientConfig) -> CliDependencies:
    """Build concrete dependencies for CLI commands.

    Args:
        config: Client configuration (API base, retry engine and token path).
    """
    token_store = FileTokenStore(Path(config.token_path))
    client = build_api_client(config=config, token_store=token_store)
    api = ShopApi.from_client(client)
    return CliDependencies(
        api=api,
        token_store=token_store,
        store=Store(api=api, token_store=token_store),
        payment_gateway=StubPaymentGateway(),
    )


app = create_app(build_cli_dependencies)
