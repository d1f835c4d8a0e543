"""Error taxonomy for token issuance and redemption."""

from __future__ import annotations


class IdempotenceError(Exception):
    """Base class for all idempotence errors."""


class TokenNotFoundError(IdempotenceError, KeyError):
    """Token is not currently valid.

    Raised for tokens that were never issued and for tokens that were already
    redeemed. The two cases are indistinguishable once an entry is removed.
    """

    def __init__(self, token: str) -> None:
        super().__init__(token)
        self.token = token

    def __str__(self) -> str:
        return "token does not exist or was already redeemed"


class TokenStoreError(IdempotenceError):
    """Shared store backend is unavailable or returned an error."""
