"""Pytest configuration and fixtures."""

import asyncio
import time
from datetime import datetime, timezone
from pathlib import Path

import jwt
import pytest
from fastapi.testclient import TestClient

from charmcatalog.app import create_app
from charmcatalog.config import Settings
from charmcatalog.db.database import Database
from charmcatalog.db.repositories.entity_repo import EntityRepository
from charmcatalog.models.entity import Entity
from charmcatalog.models.reference import Reference

JWT_SECRET = "test_jwt_secret_for_catalog"

# Store contents of the wordpress scenario: (id, upload day).
WORDPRESS_ENTITIES = [
    ("cs:precise/wordpress-23", 1),
    ("cs:precise/wordpress-24", 2),
    ("cs:trusty/wordpress-24", 3),
    ("cs:trusty/wordpress-25", 4),
    ("cs:utopic/wordpress-10", 5),
    ("cs:bundle/wordpress-10", 6),
]


def make_token(username: str, groups: list[str] | None = None, secret: str = JWT_SECRET, exp_hours: int = 1) -> str:
    """Create an HS256 bearer token."""
    payload = {
        "username": username,
        "groups": groups or [],
        "exp": int(time.time()) + exp_hours * 3600,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_header(username: str, groups: list[str] | None = None) -> dict:
    return {"Authorization": f"Bearer {make_token(username, groups)}"}


async def seed_wordpress(db_url: str) -> None:
    """Populate a database with the wordpress scenario.

    Args:
        db_url: Database URL.
    """
    db = Database(db_url)
    await db.initialize()
    repo = EntityRepository(db)
    try:
        for text, day in WORDPRESS_ENTITIES:
            ref = Reference.parse(text)
            await repo.add_entity(Entity(
                ref=ref,
                size=1000 + ref.revision,
                blob_hash=f"sha384-{ref.series}-{ref.revision}",
                blob_hash256=f"sha256-{ref.series}-{ref.revision}",
                upload_time=datetime(2015, 3, day, 12, 0, tzinfo=timezone.utc),
                extra_info={"vcs-revision": f"r{ref.revision}"},
            ))
    finally:
        await db.close()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings with temporary database.

    Args:
        tmp_path: Pytest temporary path fixture.

    Returns:
        Test settings.
    """
    db_path = tmp_path / "test_catalog.db"
    return Settings(
        host="127.0.0.1",
        port=8000,
        debug=False,
        database_url=f"sqlite:///{db_path}",
        cors_origins=["http://localhost:3000"],
        jwt_secret=JWT_SECRET,
        admin_group="charmstore-admin",
        log_level="DEBUG",
    )


@pytest.fixture
def app(test_settings: Settings):
    """Create test application.

    Args:
        test_settings: Test settings.

    Returns:
        FastAPI application.
    """
    return create_app(test_settings)


@pytest.fixture
def client(app) -> TestClient:
    """Create test client with lifespan.

    Args:
        app: FastAPI application.

    Returns:
        Test client.
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture
def wordpress_client(test_settings: Settings, app) -> TestClient:
    """Create a test client over a database holding the wordpress scenario.

    Args:
        test_settings: Test settings.
        app: FastAPI application.

    Returns:
        Test client.
    """
    asyncio.run(seed_wordpress(test_settings.database_url))
    with TestClient(app) as client:
        yield client
