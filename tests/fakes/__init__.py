"""Exports for test fakes."""

from .api import BASE_URL, build_test_client, build_test_store
from .http import ScriptedSession, make_response
from .resilience import FakeProbe, RecordingSleeper
from .token_store import InMemoryTokenStore

__all__ = [
    "BASE_URL",
    "FakeProbe",
    "InMemoryTokenStore",
    "RecordingSleeper",
    "ScriptedSession",
    "build_test_client",
    "build_test_store",
    "make_response",
]
