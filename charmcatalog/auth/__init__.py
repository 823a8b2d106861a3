"""Authentication module for bearer token validation."""

from charmcatalog.auth.token import TokenClient, TokenPayload

__all__ = ["TokenClient", "TokenPayload"]
