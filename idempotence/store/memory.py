"""In-memory token store."""

from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

from ..errors import TokenNotFoundError
from ..utils.logging import get_logger
from .base import TokenStore

logger = get_logger(__name__)

_MISSING = object()


class InMemoryTokenStore(TokenStore):
    """Process-local store backed by a lock-guarded dict."""

    def __init__(self) -> None:
        self._tokens: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Tuple[Optional[str], bool]:
        with self._lock:
            if key in self._tokens:
                return self._tokens[key], True
        return None, False

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._tokens[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            value = self._tokens.pop(key, _MISSING)
        if value is _MISSING:
            logger.debug("token_redeem_miss", backend="memory")
            raise TokenNotFoundError(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
