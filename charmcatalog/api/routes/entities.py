"""Charm and bundle id routes.

Every route resolves the id, checks the entity ACL, then answers.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Response

from charmcatalog.api.deps import get_entity_service, verify_token
from charmcatalog.auth.token import TokenPayload
from charmcatalog.models.entity import ExpandedId
from charmcatalog.models.reference import Reference
from charmcatalog.services.entity_service import EntityService

router = APIRouter()


async def _resolve(id: str, service: EntityService) -> Reference:
    return await service.resolve(Reference.parse(id))


@router.get("/{id:path}/expand-id", response_model=list[ExpandedId])
async def expand_id(
    id: str,
    service: EntityService = Depends(get_entity_service),
    user: Optional[TokenPayload] = Depends(verify_token),
) -> list[ExpandedId]:
    """List every series and revision of an entity.

    Args:
        id: Charm or bundle id, possibly partial.
        service: Entity service.
        user: Caller, if authenticated.

    Returns:
        Expanded ids, newest series and revision first.
    """
    ref = await _resolve(id, service)
    await service.authorize_read(ref, user)
    return [ExpandedId(id=str(r)) for r in await service.expand_id(ref)]


@router.get("/{id:path}/meta/{name}/{path:path}", response_model=None)
async def get_meta_path(
    id: str,
    name: str,
    path: str,
    service: EntityService = Depends(get_entity_service),
    user: Optional[TokenPayload] = Depends(verify_token),
) -> Any:
    """Get a nested metadata value, e.g. extra-info/key or perm/read."""
    ref = await _resolve(id, service)
    await service.authorize_read(ref, user)
    return await service.meta(ref, name, path)


@router.get("/{id:path}/meta/{name}", response_model=None)
async def get_meta(
    id: str,
    name: str,
    service: EntityService = Depends(get_entity_service),
    user: Optional[TokenPayload] = Depends(verify_token),
) -> Any:
    """Get a metadata value.

    Args:
        id: Charm or bundle id, possibly partial.
        name: Metadata name.
        service: Entity service.
        user: Caller, if authenticated.

    Returns:
        Metadata value.
    """
    ref = await _resolve(id, service)
    await service.authorize_read(ref, user)
    return await service.meta(ref, name)


@router.put("/{id:path}/meta/{name}/{path:path}")
async def put_meta_path(
    id: str,
    name: str,
    path: str,
    value: Any = Body(...),
    service: EntityService = Depends(get_entity_service),
    user: Optional[TokenPayload] = Depends(verify_token),
) -> Response:
    """Set a nested metadata value."""
    ref = await _resolve(id, service)
    await service.authorize_write(ref, user)
    await service.put_meta(ref, name, path, value)
    return Response(status_code=200)


@router.put("/{id:path}/meta/{name}")
async def put_meta(
    id: str,
    name: str,
    value: Any = Body(...),
    service: EntityService = Depends(get_entity_service),
    user: Optional[TokenPayload] = Depends(verify_token),
) -> Response:
    """Set a metadata value.

    Args:
        id: Charm or bundle id, possibly partial.
        name: Metadata name, "extra-info" or "perm".
        value: JSON body.
        service: Entity service.
        user: Caller, if authenticated.

    Returns:
        Empty response.
    """
    ref = await _resolve(id, service)
    await service.authorize_write(ref, user)
    await service.put_meta(ref, name, "", value)
    return Response(status_code=200)
