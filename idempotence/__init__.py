"""Idempotence token issuance and single-use redemption.

A caller issues a token, tags an action with it, and later redeems the token
exactly once to confirm the action was not already processed.
"""

from .config import TokenServiceConfig
from .errors import IdempotenceError, TokenNotFoundError, TokenStoreError
from .service import TokenService, default_token_service, token_service
from .store import InMemoryTokenStore, TokenStore
from .token import RandomTokenBuilder, TokenBuilder, UUIDTokenBuilder

__all__ = [
    "TokenService",
    "token_service",
    "default_token_service",
    "TokenServiceConfig",
    "TokenStore",
    "InMemoryTokenStore",
    "TokenBuilder",
    "UUIDTokenBuilder",
    "RandomTokenBuilder",
    "IdempotenceError",
    "TokenNotFoundError",
    "TokenStoreError",
]
