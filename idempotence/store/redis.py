"""Redis-backed token store for sharing one token namespace across processes."""

from __future__ import annotations

from typing import Optional, Tuple

from redis import Redis
from redis.exceptions import RedisError

from ..errors import TokenNotFoundError, TokenStoreError
from ..utils.logging import get_logger
from .base import TokenStore

logger = get_logger(__name__)


class RedisTokenStore(TokenStore):
    """Token store on a synchronous ``redis`` client.

    Key format: {prefix}:token:{key}

    ``DEL`` replies with the number of keys it removed, so among concurrent
    deletes of one key exactly one sees 1.
    """

    def __init__(self, redis: Redis, key_prefix: str = "idem") -> None:
        self._redis = redis
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, *, key_prefix: str = "idem") -> "RedisTokenStore":
        """Create a store with a client connected to ``url``."""
        return cls(Redis.from_url(url), key_prefix=key_prefix)

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}:token:{key}"

    def get(self, key: str) -> Tuple[Optional[str], bool]:
        try:
            value = self._redis.get(self._make_key(key))
        except RedisError as e:
            raise TokenStoreError(f"Failed to look up token: {e}") from e
        if value is None:
            return None, False
        return (value.decode("utf-8") if isinstance(value, bytes) else value), True

    def put(self, key: str, value: str) -> None:
        try:
            self._redis.set(self._make_key(key), value)
        except RedisError as e:
            raise TokenStoreError(f"Failed to store token: {e}") from e

    def delete(self, key: str) -> None:
        try:
            removed = self._redis.delete(self._make_key(key))
        except RedisError as e:
            raise TokenStoreError(f"Failed to delete token: {e}") from e
        if not removed:
            logger.debug("token_redeem_miss", backend="redis")
            raise TokenNotFoundError(key)

    def close(self) -> None:
        self._redis.close()
