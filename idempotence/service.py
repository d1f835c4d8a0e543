"""Token issuance and single-use redemption."""

from __future__ import annotations

import threading
from typing import Optional

from .config import TokenServiceConfig
from .store.base import TokenStore
from .store.factory import create_store
from .store.memory import InMemoryTokenStore
from .token.builder import TokenBuilder, UUIDTokenBuilder, create_builder
from .utils.logging import get_logger
from .utils.time import issued_marker

logger = get_logger(__name__)


class TokenService:
    """Issue tokens and redeem each of them at most once.

    The service holds no lock of its own. At-most-once redemption comes from
    the store's atomic ``delete``.
    """

    def __init__(self, store: Optional[TokenStore] = None, builder: Optional[TokenBuilder] = None) -> None:
        self._store = store if store is not None else InMemoryTokenStore()
        self._builder = builder if builder is not None else UUIDTokenBuilder()

    @property
    def store(self) -> TokenStore:
        return self._store

    @property
    def builder(self) -> TokenBuilder:
        return self._builder

    def issue_token(self) -> str:
        """Build a new token and record it as issued."""
        token = self._builder.build()
        self._store.put(token, issued_marker())
        return token

    def redeem_token(self, token: str) -> None:
        """Consume ``token``.

        Raises:
            TokenNotFoundError: the token was never issued or was already redeemed.
        """
        self._store.delete(token)

    def is_pending(self, token: str) -> bool:
        """Return True when ``token`` is issued and not yet redeemed.

        Advisory only; a concurrent redeem can consume the token right after
        this returns.
        """
        _, found = self._store.get(token)
        return found


_service: Optional[TokenService] = None
_service_lock = threading.Lock()


def token_service(store: Optional[TokenStore] = None, builder: Optional[TokenBuilder] = None) -> TokenService:
    """Return the process-wide service, creating it on first call.

    The first call wins. Later calls return the same instance and ignore
    ``store`` and ``builder``. Without arguments the first call builds the
    store and builder from ``TokenServiceConfig.from_env()``.
    """
    global _service
    with _service_lock:
        created = _service is None
        if created:
            if store is None or builder is None:
                config = TokenServiceConfig.from_env()
                store = store if store is not None else create_store(config)
                builder = builder if builder is not None else create_builder(config.builder)
            _service = TokenService(store=store, builder=builder)
        service = _service

    if created:
        logger.info(
            "token_service_initialized",
            store=type(service.store).__name__,
            builder=type(service.builder).__name__,
        )
    elif (store is not None and store is not service.store) or (
        builder is not None and builder is not service.builder
    ):
        logger.warning(
            "token_service_already_initialized",
            ignored_store=type(store).__name__ if store is not None else None,
            ignored_builder=type(builder).__name__ if builder is not None else None,
        )
    return service


def default_token_service() -> TokenService:
    """Return the process-wide service with its configured store and builder."""
    return token_service()
