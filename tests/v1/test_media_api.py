"""Tests for media endpoints."""

from fastapi import status


def test_upload_url_requires_auth(client, alice_headers) -> None:
    anonymous = client.post("/api/v1/media/upload-url")
    authed = client.post("/api/v1/media/upload-url", headers=alice_headers)

    assert anonymous.status_code == status.HTTP_401_UNAUTHORIZED
    assert authed.json() == {"upload_url": "https://blobs.test/upload/1"}


def test_file_url_lookup(client, storage) -> None:
    storage.add("file-9")

    found = client.get("/api/v1/media/files/file-9/url")
    missing = client.get("/api/v1/media/files/nope/url")

    assert found.json() == {"url": "https://blobs.test/file-9"}
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_resolve_drops_unresolvable(client, storage) -> None:
    storage.add("ok")

    response = client.post(
        "/api/v1/media/resolve",
        json={"refs": ["ok", "https://direct.test/z.png", {"kind": "handle", "value": "gone"}]},
    )

    assert response.json() == {"urls": ["https://blobs.test/ok", "https://direct.test/z.png"]}
