"""Durable token storage.

Usage example:
    from pathlib import Path

    from shop_client.infrastructure.token_store import FileTokenStore

    store = FileTokenStore(Path("~/.shop_client/storage.json").expanduser())
    store.set("eyJhbGciOi...")
    token = store.get()
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import override

from ..observability import get_logger
from ..protocols import TokenStore
from .io.validation import IncomingDataError, validate_json_as

TOKEN_KEY = "token"

logger = get_logger("shop_client.infrastructure.token_store")


def _new_lock() -> threading.Lock:
    return threading.Lock()


@dataclass
class FileTokenStore(TokenStore):
    """JSON key-value file holding the bearer credential under a single key.

    Writes go through a temporary file and an atomic rename so a crash never
    leaves a half-written token behind.
    """

    path: Path
    key: str = TOKEN_KEY
    _lock: threading.Lock = field(default_factory=_new_lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            return validate_json_as(dict[str, object], self.path.read_bytes())
        except IncomingDataError:
            logger.warning("Ignoring unreadable token storage at %s", self.path)
            return {}

    def _write(self, payload: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    @override
    def get(self) -> str | None:
        with self._lock:
            value = self._read().get(self.key)
        return value if isinstance(value, str) and value else None

    @override
    def set(self, token: str) -> None:
        with self._lock:
            payload = self._read()
            payload[self.key] = token
            self._write(payload)

    @override
    def clear(self) -> None:
        with self._lock:
            payload = self._read()
            if self.key not in payload:
                return
            del payload[self.key]
            self._write(payload)
