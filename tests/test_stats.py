"""Tests for the download statistics endpoints."""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from conftest import auth_header

ADMIN = auth_header("root", ["charmstore-admin"])


def _entries(*items: tuple[str, datetime]) -> dict:
    return {
        "Entries": [
            {"CharmReference": ref, "Timestamp": ts.isoformat()}
            for ref, ts in items
        ]
    }


def test_update_requires_admin(wordpress_client: TestClient) -> None:
    """Test that only admins may record downloads.

    Args:
        wordpress_client: Test client over the wordpress store.
    """
    body = _entries(("cs:trusty/wordpress-25", datetime.now(timezone.utc)))
    assert wordpress_client.put("/v5/stats/update", json=body).status_code == 401
    assert wordpress_client.put("/v5/stats/update", json=body, headers=auth_header("alice")).status_code == 401
    assert wordpress_client.put("/v5/stats/update", json=body, headers=ADMIN).status_code == 200


def test_update_rejects_partial_reference(wordpress_client: TestClient) -> None:
    body = _entries(("cs:wordpress", datetime.now(timezone.utc)))
    response = wordpress_client.put("/v5/stats/update", json=body, headers=ADMIN)
    assert response.status_code == 400


def test_update_is_all_or_nothing(wordpress_client: TestClient) -> None:
    """Test that a batch with an invalid entry records nothing."""
    now = datetime.now(timezone.utc)
    body = _entries(("cs:trusty/wordpress-25", now), ("cs:wordpress", now))
    response = wordpress_client.put("/v5/stats/update", json=body, headers=ADMIN)
    assert response.status_code == 400

    response = wordpress_client.get("/v5/stats/counter/archive-download:trusty:wordpress::25")
    assert response.json() == [{"Count": 0}]
    response = wordpress_client.get("/v5/stats/counter/archive-download:trusty:wordpress:")
    assert response.json() == [{"Count": 0}]


def test_counter(wordpress_client: TestClient) -> None:
    """Test exact, prefix and list counter queries."""
    day = datetime(2015, 3, 2, 10, tzinfo=timezone.utc)
    body = _entries(
        ("cs:trusty/wordpress-25", day),
        ("cs:trusty/wordpress-25", day),
        ("cs:trusty/wordpress-24", day + timedelta(days=8)),
    )
    assert wordpress_client.put("/v5/stats/update", json=body, headers=ADMIN).status_code == 200

    response = wordpress_client.get("/v5/stats/counter/archive-download:trusty:wordpress::25")
    assert response.status_code == 200
    assert response.json() == [{"Count": 2}]

    response = wordpress_client.get("/v5/stats/counter/archive-download:trusty:wordpress:")
    assert response.json() == [{"Count": 3}]

    response = wordpress_client.get("/v5/stats/counter/archive-download:trusty:*")
    assert response.json() == [{"Count": 6}]

    response = wordpress_client.get("/v5/stats/counter/archive-download:trusty:wordpress::*?list=1")
    assert response.json() == [
        {"Key": "archive-download:trusty:wordpress::25", "Count": 2},
        {"Key": "archive-download:trusty:wordpress::24", "Count": 1},
    ]

    response = wordpress_client.get("/v5/stats/counter/archive-download:trusty:wordpress::*?by=week")
    assert response.json() == [
        {"Date": "2015-03-09", "Count": 2},
        {"Date": "2015-03-16", "Count": 1},
    ]

    response = wordpress_client.get("/v5/stats/counter/archive-download:vivid:*")
    assert response.json() == [{"Count": 0}]


def test_counter_bad_params(wordpress_client: TestClient) -> None:
    assert wordpress_client.get("/v5/stats/counter/a:*?by=month").status_code == 400
    assert wordpress_client.get("/v5/stats/counter/a:*?start=2015-13-01").status_code == 400
    assert wordpress_client.get("/v5/stats/counter/*").status_code == 400


def test_meta_stats(wordpress_client: TestClient) -> None:
    """Test per-entity download counts over recent periods."""
    now = datetime.now(timezone.utc)
    body = _entries(
        ("cs:trusty/wordpress-25", now),
        ("cs:trusty/wordpress-25", now - timedelta(days=3)),
        ("cs:trusty/wordpress-25", now - timedelta(days=20)),
        ("cs:trusty/wordpress-24", now - timedelta(days=100)),
    )
    assert wordpress_client.put("/v5/stats/update", json=body, headers=ADMIN).status_code == 200

    response = wordpress_client.get("/v5/wordpress/meta/stats")
    assert response.status_code == 200
    assert response.json() == {
        "ArchiveDownloadCount": 3,
        "ArchiveDownload": {"Total": 3, "Day": 1, "Week": 2, "Month": 3},
        "ArchiveDownloadAllRevisions": {"Total": 4, "Day": 1, "Week": 2, "Month": 3},
    }
