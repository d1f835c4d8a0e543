"""Pluggable token string builders."""

from .builder import BUILDERS, RandomTokenBuilder, TokenBuilder, UUIDTokenBuilder, create_builder

__all__ = ["BUILDERS", "TokenBuilder", "UUIDTokenBuilder", "RandomTokenBuilder", "create_builder"]
