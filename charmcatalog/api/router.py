"""Main API router configuration."""

from fastapi import APIRouter

from charmcatalog.api.routes import auth, changes, entities, health, stats


def create_router() -> APIRouter:
    """Create the main API router with all routes.

    Id routes match any path ending in /meta/... or /expand-id, so they
    are included last.

    Returns:
        Configured APIRouter.
    """
    router = APIRouter()

    # Health check routes
    router.include_router(
        health.router,
        tags=["health"],
    )

    # Auth routes
    router.include_router(
        auth.router,
        tags=["auth"],
    )

    # Publication feed
    router.include_router(
        changes.router,
        prefix="/changes",
        tags=["changes"],
    )

    # Statistics routes
    router.include_router(
        stats.router,
        prefix="/stats",
        tags=["stats"],
    )

    # Charm and bundle routes
    router.include_router(
        entities.router,
        tags=["entities"],
    )

    return router
