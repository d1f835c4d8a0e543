"""Base token store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Tuple


class TokenStore(ABC):
    """Mapping from token string to a presence marker.

    Implementations must make :meth:`delete` a single indivisible
    check-and-remove: of N concurrent deletes on one key exactly one
    succeeds. Without it a token can be redeemed twice.
    """

    @abstractmethod
    def get(self, key: str) -> Tuple[Optional[str], bool]:
        """Return ``(value, True)`` when present, ``(None, False)`` otherwise."""

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Insert or overwrite ``key``. Last write wins."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Atomically remove ``key``; raise ``TokenNotFoundError`` when absent."""

    def close(self) -> None:
        """Release backend resources if needed."""
