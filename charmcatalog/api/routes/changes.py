"""Publication feed routes."""

from typing import Optional

from fastapi import APIRouter, Depends

from charmcatalog.api.deps import get_entity_service, parse_date, verify_token
from charmcatalog.auth.token import TokenPayload
from charmcatalog.exceptions import BadRequestError
from charmcatalog.models.entity import Published
from charmcatalog.services.entity_service import EntityService

router = APIRouter()


@router.get("/published", response_model=list[Published])
async def changes_published(
    start: Optional[str] = None,
    stop: Optional[str] = None,
    limit: Optional[str] = None,
    service: EntityService = Depends(get_entity_service),
    user: Optional[TokenPayload] = Depends(verify_token),
) -> list[Published]:
    """List published entities, newest first.

    Args:
        start: First day included (YYYY-MM-DD).
        stop: Last day included (YYYY-MM-DD).
        limit: Maximum number of results.
        service: Entity service.
        user: Caller; entities it cannot read are skipped.

    Returns:
        Publication records.
    """
    max_results = None
    if limit:
        try:
            max_results = int(limit)
        except ValueError:
            max_results = 0
        if max_results <= 0:
            raise BadRequestError("invalid 'limit' value")

    return await service.changes_published(
        user,
        start=parse_date("start", start),
        stop=parse_date("stop", stop),
        limit=max_results,
    )
