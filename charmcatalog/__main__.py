"""Entry point for running the catalog server."""

import uvicorn

from charmcatalog.config import get_settings


def main() -> None:
    """Run the catalog server."""
    settings = get_settings()

    uvicorn.run(
        "charmcatalog.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
