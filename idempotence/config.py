"""Environment-driven configuration for the token service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .utils.logging import setup_logging

BACKENDS = ("memory", "postgres", "redis")


@dataclass(frozen=True)
class TokenServiceConfig:
    """Store backend, token builder and logging settings."""

    backend: str = "memory"
    builder: str = "uuid1"
    postgres_dsn: Optional[str] = None
    postgres_table: str = "idempotence_tokens"
    redis_url: Optional[str] = None
    key_prefix: str = "idem"
    log_level: str = "INFO"
    log_format: str = "json"

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown store backend '{self.backend}'. Expected one of: {', '.join(BACKENDS)}.")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TokenServiceConfig":
        """Build config from ``IDEMPOTENCE_*`` variables.

        Without an explicit backend, a Redis URL selects ``redis`` and a
        PostgreSQL DSN selects ``postgres``; otherwise the in-memory store is used.
        """
        env = os.environ if environ is None else environ
        redis_url = env.get("IDEMPOTENCE_REDIS_URL") or None
        postgres_dsn = env.get("IDEMPOTENCE_PG_DSN") or env.get("DATABASE_URL") or None

        backend = (env.get("IDEMPOTENCE_STORE_BACKEND") or "").strip().lower()
        if not backend:
            if redis_url:
                backend = "redis"
            elif postgres_dsn:
                backend = "postgres"
            else:
                backend = "memory"

        return cls(
            backend=backend,
            builder=env.get("IDEMPOTENCE_TOKEN_BUILDER") or "uuid1",
            postgres_dsn=postgres_dsn,
            postgres_table=env.get("IDEMPOTENCE_PG_TABLE", "idempotence_tokens"),
            redis_url=redis_url,
            key_prefix=env.get("IDEMPOTENCE_KEY_PREFIX", "idem"),
            log_level=env.get("IDEMPOTENCE_LOG_LEVEL", "INFO"),
            log_format=env.get("IDEMPOTENCE_LOG_FORMAT", "json"),
        )

    def configure_logging(self) -> None:
        """Apply ``log_level`` and ``log_format`` to structlog.

        Process-wide; meant for a host entry point, never called by the library.
        """
        setup_logging(level=self.log_level, format=self.log_format)
