"""HTTP API for the charm catalog."""

from charmcatalog.api.router import create_router

__all__ = ["create_router"]
