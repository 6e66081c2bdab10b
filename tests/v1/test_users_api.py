"""Tests for user profile endpoints."""

from fastapi import status

from tests.factories import auth_headers


def test_me_requires_auth(client) -> None:
    response = client.get("/api/v1/users/me")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Can't get current user"


def test_invalid_token_is_401(client, alice) -> None:
    response = client.get("/api/v1/users/me", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_returns_profile(client, alice, alice_headers) -> None:
    response = client.get("/api/v1/users/me", headers=alice_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == alice.id
    assert data["email"] == alice.email
    assert data["is_private"] is False


def test_sync_creates_user_for_token_subject(client, db_session) -> None:
    from campus_threads.core.security import create_access_token

    headers = {"Authorization": f"Bearer {create_access_token('ext_new')}"}
    payload = {
        "external_id": "ext_new",
        "email": "new@campus.test",
        "first_name": "Nia",
        "last_name": "Lee",
        "image_url": "https://provider.test/nia.png",
    }

    response = client.post("/api/v1/users/sync", json=payload, headers=headers)
    mismatch = client.post(
        "/api/v1/users/sync",
        json={**payload, "external_id": "someone_else"},
        headers=headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["username"] == "NiaLee"
    assert response.json()["avatar_url"] == "https://provider.test/nia.png"
    assert mismatch.status_code == status.HTTP_403_FORBIDDEN


def test_other_profiles_hide_email(client, alice, bob, alice_headers) -> None:
    response = client.get(f"/api/v1/users/{bob.id}", headers=alice_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] is None
    assert client.get("/api/v1/users/999999").status_code == status.HTTP_404_NOT_FOUND


def test_patch_profile(client, alice, bob, alice_headers) -> None:
    ok = client.patch(
        f"/api/v1/users/{alice.id}",
        json={"bio": "Robotics club", "semester": "5"},
        headers=alice_headers,
    )
    forbidden = client.patch(f"/api/v1/users/{bob.id}", json={"bio": "x"}, headers=alice_headers)
    unknown_field = client.patch(
        f"/api/v1/users/{alice.id}",
        json={"followers_count": 1000},
        headers=alice_headers,
    )

    assert ok.status_code == status.HTTP_200_OK
    assert ok.json()["bio"] == "Robotics club"
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN
    assert unknown_field.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_avatar_handle_is_resolved(client, storage, alice, alice_headers) -> None:
    storage.add("avatar-1", "https://blobs.test/avatar-1.png")

    response = client.put(
        "/api/v1/users/me/avatar",
        json={"avatar": {"kind": "handle", "value": "avatar-1"}},
        headers=alice_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["avatar"] == {"kind": "handle", "value": "avatar-1"}
    assert data["avatar_url"] == "https://blobs.test/avatar-1.png"

    cleared = client.delete("/api/v1/users/me/avatar", headers=alice_headers)
    assert cleared.json()["avatar"] is None


def test_privacy_toggle(client, alice_headers) -> None:
    response = client.put("/api/v1/users/me/privacy", json={"is_private": True}, headers=alice_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_private"] is True


def test_search_and_recommended(client, alice, bob, carol) -> None:
    search = client.get("/api/v1/users/search", params={"q": "car"}, headers=auth_headers(alice))
    recommended = client.get("/api/v1/users/recommended", headers=auth_headers(alice))
    by_external = client.get(f"/api/v1/users/by-external/{bob.external_id}")

    assert [u["id"] for u in search.json()] == [carol.id]
    assert {u["id"] for u in recommended.json()} == {bob.id, carol.id}
    assert by_external.json()["id"] == bob.id
