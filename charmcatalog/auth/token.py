"""
Bearer Token Client

Validates the HS256 JWT bearer tokens presented to the catalog and
checks the resulting identity against entity ACLs.

Classes:
    TokenPayload: Decoded identity claims
    TokenClient: Token validation

Token Structure:
{
    "username": str,
    "groups": [str, ...],   # optional
    "exp": int              # Unix timestamp
}
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import jwt

from charmcatalog.models.entity import EVERYONE

logger = logging.getLogger(__name__)


@dataclass
class TokenPayload:
    """Identity carried by a bearer token."""
    username: str
    groups: list[str] = field(default_factory=list)
    exp: int = 0

    def is_member(self, group: str) -> bool:
        return group == self.username or group in self.groups


def acl_admits(acl: Iterable[str], user: Optional[TokenPayload], admin_group: str = "") -> bool:
    """Check whether an ACL admits a caller.

    Args:
        acl: Usernames, groups or "everyone".
        user: Authenticated caller, None for anonymous requests.
        admin_group: Group whose members are always admitted.

    Returns:
        True if access is allowed.
    """
    acl = list(acl)
    if EVERYONE in acl:
        return True
    if user is None:
        return False
    if admin_group and user.is_member(admin_group):
        return True
    return any(user.is_member(name) for name in acl)


class TokenClient:
    """Client for validating bearer tokens."""

    def __init__(self, jwt_secret: str):
        """Initialize client.

        Args:
            jwt_secret: Shared secret for JWT validation (HS256)
        """
        self.jwt_secret = jwt_secret

    def validate_token(self, token: str) -> Optional[TokenPayload]:
        """Validate a JWT token.

        Args:
            token: JWT token string

        Returns:
            TokenPayload if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=["HS256"],
                options={
                    "verify_signature": True,
                    "require": ["username", "exp"],
                },
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            return None

        groups = payload.get("groups") or []
        if not isinstance(groups, list):
            logger.warning("Invalid token: groups is not a list")
            return None

        return TokenPayload(
            username=payload["username"],
            groups=[str(g) for g in groups],
            exp=payload["exp"],
        )
