"""Authentication routes."""

from fastapi import APIRouter, Depends

from charmcatalog.api.deps import get_current_user
from charmcatalog.auth.token import TokenPayload
from charmcatalog.models.entity import WhoAmIResponse

router = APIRouter()


@router.get("/whoami", response_model=WhoAmIResponse)
async def whoami(user: TokenPayload = Depends(get_current_user)) -> WhoAmIResponse:
    """Report the authenticated user and their groups.

    Args:
        user: Current authenticated user.

    Returns:
        User name and groups.
    """
    return WhoAmIResponse(user=user.username, groups=user.groups)
