"""Tests for the charm and bundle id endpoints."""

from fastapi.testclient import TestClient

from conftest import auth_header


def test_resolve_bare_name(wordpress_client: TestClient) -> None:
    """Test that a bare name resolves to the latest LTS revision.

    Args:
        wordpress_client: Test client over the wordpress store.
    """
    response = wordpress_client.get("/v5/wordpress/meta/id")
    assert response.status_code == 200
    assert response.json() == {
        "Id": "cs:trusty/wordpress-25",
        "User": "",
        "Series": "trusty",
        "Name": "wordpress",
        "Revision": 25,
    }


def test_resolve_with_series(wordpress_client: TestClient) -> None:
    response = wordpress_client.get("/v5/precise/wordpress/meta/id")
    assert response.status_code == 200
    assert response.json()["Id"] == "cs:precise/wordpress-24"


def test_revision_info(wordpress_client: TestClient) -> None:
    """Test that revision info lists the series' revisions, newest first."""
    response = wordpress_client.get("/v5/trusty/wordpress-25/meta/revision-info")
    assert response.status_code == 200
    assert response.json() == {"Revisions": ["cs:trusty/wordpress-25", "cs:trusty/wordpress-24"]}


def test_id_projections(wordpress_client: TestClient) -> None:
    assert wordpress_client.get("/v5/wordpress/meta/id-name").json() == {"Name": "wordpress"}
    assert wordpress_client.get("/v5/wordpress/meta/id-user").json() == {"User": ""}
    assert wordpress_client.get("/v5/wordpress/meta/id-series").json() == {"Series": "trusty"}
    assert wordpress_client.get("/v5/wordpress/meta/id-revision").json() == {"Revision": 25}


def test_archive_metadata(wordpress_client: TestClient) -> None:
    assert wordpress_client.get("/v5/utopic/wordpress/meta/archive-size").json() == {"Size": 1010}
    assert wordpress_client.get("/v5/trusty/wordpress-24/meta/hash").json() == {"Sum": "sha384-trusty-24"}
    assert wordpress_client.get("/v5/trusty/wordpress-24/meta/hash256").json() == {"Sum": "sha256-trusty-24"}

    response = wordpress_client.get("/v5/bundle/wordpress-10/meta/archive-upload-time")
    assert response.status_code == 200
    assert response.json()["UploadTime"].startswith("2015-03-06T12:00:00")


def test_not_found(wordpress_client: TestClient) -> None:
    """Test the error body for an unknown name."""
    response = wordpress_client.get("/v5/mysql/meta/id")
    assert response.status_code == 404
    assert response.json() == {
        "detail": 'no matching charm or bundle for "cs:mysql"',
        "code": "not found",
    }


def test_fully_qualified_unknown_entity(wordpress_client: TestClient) -> None:
    response = wordpress_client.get("/v5/trusty/wordpress-99/meta/archive-size")
    assert response.status_code == 404


def test_bad_reference(wordpress_client: TestClient) -> None:
    response = wordpress_client.get("/v5/Bad_Name/meta/id")
    assert response.status_code == 400
    assert response.json()["code"] == "bad request"


def test_non_ascii_revision(wordpress_client: TestClient) -> None:
    response = wordpress_client.get("/v5/wordpress-%C2%B2/meta/id")
    assert response.status_code == 400
    assert response.json()["code"] == "bad request"


def test_unknown_metadata(wordpress_client: TestClient) -> None:
    response = wordpress_client.get("/v5/wordpress/meta/no-such-thing")
    assert response.status_code == 404


def test_metadata_sub_path(wordpress_client: TestClient) -> None:
    """Test that only extra-info and perm accept a sub-path."""
    response = wordpress_client.get("/v5/wordpress/meta/archive-size/garbage")
    assert response.status_code == 404
    assert response.json()["code"] == "not found"

    response = wordpress_client.get("/v5/wordpress/meta/id/name")
    assert response.status_code == 404

    response = wordpress_client.get("/v5/wordpress/meta/extra-info/vcs-revision")
    assert response.status_code == 200
    assert response.json() == "r25"


def test_expand_id(wordpress_client: TestClient) -> None:
    response = wordpress_client.get("/v5/wordpress/expand-id")
    assert response.status_code == 200
    assert [item["Id"] for item in response.json()] == [
        "cs:utopic/wordpress-10",
        "cs:trusty/wordpress-25",
        "cs:trusty/wordpress-24",
        "cs:precise/wordpress-24",
        "cs:precise/wordpress-23",
        "cs:bundle/wordpress-10",
    ]


def test_extra_info(wordpress_client: TestClient) -> None:
    """Test reading and writing extra-info as an admin."""
    admin = auth_header("root", ["charmstore-admin"])

    assert wordpress_client.get("/v5/trusty/wordpress-25/meta/extra-info").json() == {"vcs-revision": "r25"}

    response = wordpress_client.put(
        "/v5/trusty/wordpress-25/meta/extra-info",
        json={"maintainer": "alice", "tags": ["blog"]},
        headers=admin,
    )
    assert response.status_code == 200

    response = wordpress_client.put(
        "/v5/trusty/wordpress-25/meta/extra-info/maintainer",
        json="bob",
        headers=admin,
    )
    assert response.status_code == 200

    assert wordpress_client.get("/v5/trusty/wordpress-25/meta/extra-info").json() == {
        "vcs-revision": "r25",
        "maintainer": "bob",
        "tags": ["blog"],
    }
    assert wordpress_client.get("/v5/trusty/wordpress-25/meta/extra-info/tags").json() == ["blog"]
    assert wordpress_client.get("/v5/trusty/wordpress-25/meta/extra-info/missing").status_code == 404


def test_extra_info_bad_key(wordpress_client: TestClient) -> None:
    admin = auth_header("root", ["charmstore-admin"])
    response = wordpress_client.put(
        "/v5/trusty/wordpress-25/meta/extra-info",
        json={"a.b": 1},
        headers=admin,
    )
    assert response.status_code == 400

    response = wordpress_client.put(
        "/v5/trusty/wordpress-25/meta/extra-info/$set",
        json=1,
        headers=admin,
    )
    assert response.status_code == 400


def test_write_requires_acl(wordpress_client: TestClient) -> None:
    """Test that anonymous and unlisted users cannot write."""
    response = wordpress_client.put("/v5/trusty/wordpress-25/meta/extra-info/x", json=1)
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"

    response = wordpress_client.put(
        "/v5/trusty/wordpress-25/meta/extra-info/x",
        json=1,
        headers=auth_header("mallory"),
    )
    assert response.status_code == 401


def test_read_only_metadata(wordpress_client: TestClient) -> None:
    response = wordpress_client.put(
        "/v5/trusty/wordpress-25/meta/archive-size",
        json={"Size": 1},
        headers=auth_header("root", ["charmstore-admin"]),
    )
    assert response.status_code == 400


def test_perm_restricts_reads(wordpress_client: TestClient) -> None:
    """Test that changing the read ACL hides the entity from others."""
    admin = auth_header("root", ["charmstore-admin"])

    assert wordpress_client.get("/v5/wordpress/meta/perm").json() == {"Read": ["everyone"], "Write": []}

    response = wordpress_client.put(
        "/v5/wordpress/meta/perm",
        json={"Read": ["wordpress-team"], "Write": ["alice"]},
        headers=admin,
    )
    assert response.status_code == 200

    assert wordpress_client.get("/v5/wordpress/meta/id").status_code == 401
    assert wordpress_client.get("/v5/wordpress/meta/id", headers=auth_header("bob")).status_code == 401

    response = wordpress_client.get("/v5/wordpress/meta/perm/read", headers=auth_header("bob", ["wordpress-team"]))
    assert response.status_code == 200
    assert response.json() == ["wordpress-team"]

    response = wordpress_client.put(
        "/v5/wordpress/meta/perm/read",
        json=["everyone"],
        headers=auth_header("bob"),
    )
    assert response.status_code == 401

    response = wordpress_client.put(
        "/v5/wordpress/meta/perm/read",
        json=["everyone"],
        headers=auth_header("alice"),
    )
    assert response.status_code == 200
    assert wordpress_client.get("/v5/wordpress/meta/id").status_code == 200


def test_perm_put_replaces_both_lists(wordpress_client: TestClient) -> None:
    """Test that a perm body without Write clears the write ACL."""
    admin = auth_header("root", ["charmstore-admin"])

    response = wordpress_client.put(
        "/v5/wordpress/meta/perm",
        json={"Read": ["everyone"], "Write": ["alice"]},
        headers=admin,
    )
    assert response.status_code == 200
    assert wordpress_client.get("/v5/wordpress/meta/perm/write").json() == ["alice"]

    response = wordpress_client.put("/v5/wordpress/meta/perm", json={"Read": ["everyone"]}, headers=admin)
    assert response.status_code == 200
    assert wordpress_client.get("/v5/wordpress/meta/perm").json() == {"Read": ["everyone"], "Write": []}

    response = wordpress_client.put(
        "/v5/wordpress/meta/extra-info/x",
        json=1,
        headers=auth_header("alice"),
    )
    assert response.status_code == 401


def test_whoami(wordpress_client: TestClient) -> None:
    response = wordpress_client.get("/v5/whoami", headers=auth_header("alice", ["wordpress-team"]))
    assert response.status_code == 200
    assert response.json() == {"User": "alice", "Groups": ["wordpress-team"]}

    assert wordpress_client.get("/v5/whoami").status_code == 401


def test_changes_published(wordpress_client: TestClient) -> None:
    """Test the publication feed ordering, range and limit."""
    response = wordpress_client.get("/v5/changes/published")
    assert response.status_code == 200
    ids = [item["Id"] for item in response.json()]
    assert ids[0] == "cs:bundle/wordpress-10"
    assert ids[-1] == "cs:precise/wordpress-23"

    response = wordpress_client.get("/v5/changes/published?start=2015-03-02&stop=2015-03-03")
    assert [item["Id"] for item in response.json()] == [
        "cs:trusty/wordpress-24",
        "cs:precise/wordpress-24",
    ]

    response = wordpress_client.get("/v5/changes/published?limit=2")
    assert len(response.json()) == 2


def test_changes_published_bad_params(wordpress_client: TestClient) -> None:
    assert wordpress_client.get("/v5/changes/published?start=yesterday").status_code == 400
    assert wordpress_client.get("/v5/changes/published?limit=0").status_code == 400
    assert wordpress_client.get("/v5/changes/published?limit=x").status_code == 400


def test_changes_published_skips_unreadable(wordpress_client: TestClient) -> None:
    wordpress_client.put(
        "/v5/wordpress/meta/perm/read",
        json=["alice"],
        headers=auth_header("root", ["charmstore-admin"]),
    )
    assert wordpress_client.get("/v5/changes/published").json() == []
    assert len(wordpress_client.get("/v5/changes/published", headers=auth_header("alice")).json()) == 6
