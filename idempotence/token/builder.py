"""Token string builders."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Type
from uuid import uuid1, uuid4


class TokenBuilder(ABC):
    """Produce a new unique token string on every call."""

    @abstractmethod
    def build(self) -> str:
        """Return a token that is unique across all calls."""


class UUIDTokenBuilder(TokenBuilder):
    """Time-ordered UUID (version 1) tokens."""

    def build(self) -> str:
        return str(uuid1())


class RandomTokenBuilder(TokenBuilder):
    """Random UUID (version 4) tokens."""

    def build(self) -> str:
        return str(uuid4())


BUILDERS: Dict[str, Type[TokenBuilder]] = {
    "uuid1": UUIDTokenBuilder,
    "uuid4": RandomTokenBuilder,
}


def create_builder(name: str = "uuid1") -> TokenBuilder:
    """Resolve a builder by name."""
    key = name.strip().lower()
    if key not in BUILDERS:
        raise ValueError(f"Unknown token builder '{name}'. Expected one of: {', '.join(BUILDERS.keys())}.")
    return BUILDERS[key]()
