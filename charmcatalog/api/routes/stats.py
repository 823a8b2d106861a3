"""Download statistics routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from charmcatalog.api.deps import get_stats_service, parse_date, require_admin
from charmcatalog.auth.token import TokenPayload
from charmcatalog.models.entity import StatsUpdateRequest
from charmcatalog.services.stats_service import StatsService

router = APIRouter()


@router.get("/counter/{key:path}")
async def stats_counter(
    key: str,
    by: str = "",
    start: Optional[str] = None,
    stop: Optional[str] = None,
    list_: str = Query("", alias="list"),
    service: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    """Query aggregated counters.

    Args:
        key: Colon separated key, e.g. "archive-download:trusty:*".
        by: Aggregation period, "day" or "week".
        start: First day included (YYYY-MM-DD).
        stop: Last day included (YYYY-MM-DD).
        list_: "1" to report one counter per matching key.
        service: Stats service.

    Returns:
        Counter values; absent keys and dates are omitted.
    """
    stats = await service.counter(
        key,
        by=by,
        start=parse_date("start", start),
        stop=parse_date("stop", stop),
        list_=list_ == "1",
    )
    return JSONResponse(
        content=[s.model_dump(by_alias=True, exclude_none=True, mode="json") for s in stats]
    )


@router.put("/update")
async def stats_update(
    request: StatsUpdateRequest,
    service: StatsService = Depends(get_stats_service),
    admin: TokenPayload = Depends(require_admin),
) -> Response:
    """Record archive downloads reported by a trusted client.

    Args:
        request: Download entries.
        service: Stats service.
        admin: Admin caller.

    Returns:
        Empty response.
    """
    await service.update(request.entries)
    return Response(status_code=200)
