"""Store selection from configuration."""

from __future__ import annotations

from typing import Optional

from ..config import TokenServiceConfig
from ..utils.logging import get_logger
from .base import TokenStore
from .memory import InMemoryTokenStore

logger = get_logger(__name__)


def create_store(config: TokenServiceConfig) -> TokenStore:
    """Create the store variant named by ``config.backend``."""
    if config.backend == "redis":
        if not config.redis_url:
            raise ValueError("IDEMPOTENCE_REDIS_URL must be set for the redis backend.")
        from .redis import RedisTokenStore

        store: TokenStore = RedisTokenStore.from_url(config.redis_url, key_prefix=config.key_prefix)
    elif config.backend == "postgres":
        if not config.postgres_dsn:
            raise ValueError("IDEMPOTENCE_PG_DSN or DATABASE_URL must be set for the postgres backend.")
        from .postgres import PostgresTokenStore

        store = PostgresTokenStore(config.postgres_dsn, table=config.postgres_table)
    else:
        store = InMemoryTokenStore()

    logger.info("token_store_created", backend=config.backend)
    return store


def create_store_from_env(config: Optional[TokenServiceConfig] = None) -> TokenStore:
    """Create a store from ``IDEMPOTENCE_*`` environment variables."""
    return create_store(config or TokenServiceConfig.from_env())
