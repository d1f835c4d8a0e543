"""Token store implementations."""

from .base import TokenStore
from .factory import create_store, create_store_from_env
from .memory import InMemoryTokenStore

__all__ = [
    "TokenStore",
    "InMemoryTokenStore",
    "PostgresTokenStore",
    "RedisTokenStore",
    "create_store",
    "create_store_from_env",
]


def __getattr__(name: str):
    if name == "PostgresTokenStore":
        from .postgres import PostgresTokenStore

        return PostgresTokenStore
    if name == "RedisTokenStore":
        from .redis import RedisTokenStore

        return RedisTokenStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
