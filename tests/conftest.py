"""Pytest fixtures shared across the suite.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import socket

import pytest

from shop_client.domain.models import Product, User
from tests.fakes import BASE_URL, InMemoryTokenStore, RecordingSleeper, ScriptedSession
from tests.support.errors import NetworkIsolationError

# =============================================================================
# Network Isolation - Block all socket connections in tests
# =============================================================================


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    """Raise an error if any test tries to make a real network connection."""
    raise NetworkIsolationError(repr(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> None:
    """Block all network access in tests.

    This fixture runs automatically for all tests and prevents any real
    network connections. Tests that need HTTP should use ScriptedSession
    or MagicMock.
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)


@pytest.fixture
def session() -> ScriptedSession:
    """Provide a scripted HTTP session rooted at the test base URL."""
    return ScriptedSession(base_url=BASE_URL)


@pytest.fixture
def token_store() -> InMemoryTokenStore:
    """Provide an empty in-memory token store."""
    return InMemoryTokenStore()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    """Provide a sleeper that records backoff delays instead of waiting."""
    return RecordingSleeper()


@pytest.fixture
def runner_product() -> Product:
    return Product(id=7, name="Runner", price=89.99, sizes=(40, 41, 42))


@pytest.fixture
def signed_in_user() -> User:
    return User(id=1, username="alice", email="alice@example.com", role="USER")

