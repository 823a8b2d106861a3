"""FastAPI dependencies for dependency injection."""

import logging
import time
from datetime import date, datetime
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from charmcatalog.auth.token import TokenClient, TokenPayload
from charmcatalog.config import Settings, get_settings
from charmcatalog.db.database import Database
from charmcatalog.db.repositories.entity_repo import EntityRepository
from charmcatalog.db.repositories.stats_repo import StatsRepository
from charmcatalog.exceptions import BadRequestError, InternalError, UnauthorizedError
from charmcatalog.resolver.preference import SeriesPreference
from charmcatalog.resolver.url import URLResolver
from charmcatalog.services.entity_service import EntityService
from charmcatalog.services.stats_service import StatsService

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)

DEBUG_USERNAME = "debug_user"


async def get_db(request: Request) -> Database:
    """Get database from request state.

    Args:
        request: FastAPI request.

    Returns:
        Database instance.
    """
    return request.state.db


async def get_entity_repo(db: Database = Depends(get_db)) -> EntityRepository:
    return EntityRepository(db)


async def get_stats_repo(db: Database = Depends(get_db)) -> StatsRepository:
    return StatsRepository(db)


async def get_resolver(
    repo: EntityRepository = Depends(get_entity_repo),
    settings: Settings = Depends(get_settings),
) -> URLResolver:
    """Get a reference resolver backed by the entity repository.

    Args:
        repo: Entity repository, used as candidate provider.
        settings: Application settings holding the LTS series.

    Returns:
        URL resolver.
    """
    return URLResolver(repo, SeriesPreference(settings.lts_series))


async def get_entity_service(
    repo: EntityRepository = Depends(get_entity_repo),
    stats_repo: StatsRepository = Depends(get_stats_repo),
    resolver: URLResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> EntityService:
    """Get entity service.

    Args:
        repo: Entity repository.
        stats_repo: Statistics repository.
        resolver: Reference resolver.
        settings: Application settings.

    Returns:
        Entity service.
    """
    return EntityService(repo, stats_repo, resolver, admin_group=settings.admin_group)


async def get_stats_service(
    stats_repo: StatsRepository = Depends(get_stats_repo),
) -> StatsService:
    return StatsService(stats_repo)


@lru_cache(maxsize=1)
def _get_token_client(jwt_secret: str) -> TokenClient:
    """Get cached token client instance.

    Args:
        jwt_secret: JWT secret for validation.

    Returns:
        Token client instance.
    """
    return TokenClient(jwt_secret=jwt_secret)


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Optional[TokenPayload]:
    """Verify the bearer token, if any.

    Args:
        credentials: HTTP authorization credentials (Bearer token).
        settings: Application settings containing the JWT secret.

    Returns:
        TokenPayload if a valid token was presented, None if no token.

    Raises:
        UnauthorizedError: If the token is invalid or expired.
        InternalError: If no secret is configured outside debug mode.
    """
    if not credentials:
        return None

    if not settings.jwt_secret:
        logger.warning("JWT secret not configured")
        if settings.debug:
            logger.warning("Debug mode: authenticating as debug admin")
            return TokenPayload(
                username=DEBUG_USERNAME,
                groups=[settings.admin_group],
                exp=int(time.time()) + 3600,
            )
        raise InternalError("authentication service not configured")

    payload = _get_token_client(settings.jwt_secret).validate_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedError("invalid or expired token")
    logger.debug(f"Token verified for user: {payload.username}")
    return payload


async def get_current_user(
    user: Optional[TokenPayload] = Depends(verify_token),
) -> TokenPayload:
    """Require an authenticated caller.

    Raises:
        UnauthorizedError: If no token was presented.
    """
    if user is None:
        raise UnauthorizedError("authentication required")
    return user


async def require_admin(
    user: TokenPayload = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
) -> TokenPayload:
    """Require a member of the admin group.

    Args:
        user: Current user.
        settings: Application settings.

    Returns:
        Admin user.

    Raises:
        UnauthorizedError: If the caller is not an admin.
    """
    if not user.is_member(settings.admin_group):
        raise UnauthorizedError("admin access required")
    return user


def parse_date(name: str, value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD query parameter.

    Args:
        name: Parameter name, used in the error message.
        value: Raw value, None or empty when absent.

    Returns:
        Parsed date or None.

    Raises:
        BadRequestError: If the value is not a valid date.
    """
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise BadRequestError(f"invalid '{name}' value \"{value}\"") from None
