"""Tests for follow graph endpoints."""

from fastapi import status


def test_follow_flow(client, alice, bob, bob_headers) -> None:
    follow = client.post(f"/api/v1/users/{alice.id}/follow", headers=bob_headers)
    again = client.post(f"/api/v1/users/{alice.id}/follow", headers=bob_headers)
    followers = client.get(f"/api/v1/users/{alice.id}/followers")
    state = client.get(f"/api/v1/users/{alice.id}/follow-status", headers=bob_headers)
    is_following = client.get(f"/api/v1/users/{alice.id}/is-following", headers=bob_headers)

    assert follow.json() == {"status": "following", "followers_count": 1}
    assert again.json()["status"] == "already_following"
    assert [u["id"] for u in followers.json()] == [bob.id]
    assert state.json()["is_following"] is True
    assert state.json()["followers_count"] == 1
    assert is_following.json() == {"is_following": True}

    unfollow = client.delete(f"/api/v1/users/{alice.id}/follow", headers=bob_headers)
    assert unfollow.json() == {"removed": True, "followers_count": 0}


def test_follow_self_is_rejected(client, alice, alice_headers) -> None:
    response = client.post(f"/api/v1/users/{alice.id}/follow", headers=alice_headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"] == "You can't follow yourself"


def test_follow_requires_auth(client, alice) -> None:
    response = client.post(f"/api/v1/users/{alice.id}/follow")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_private_account_request_flow(client, alice, bob, alice_headers, bob_headers) -> None:
    client.put("/api/v1/users/me/privacy", json={"is_private": True}, headers=alice_headers)

    requested = client.post(f"/api/v1/users/{alice.id}/follow", headers=bob_headers)
    pending = client.get("/api/v1/follow-requests", headers=alice_headers)
    request_id = pending.json()[0]["id"]
    stolen = client.post(f"/api/v1/follow-requests/{request_id}/accept", headers=bob_headers)
    accepted = client.post(f"/api/v1/follow-requests/{request_id}/accept", headers=alice_headers)
    twice = client.post(f"/api/v1/follow-requests/{request_id}/reject", headers=alice_headers)

    assert requested.json()["status"] == "requested"
    assert pending.json()[0]["user"]["id"] == bob.id
    assert stolen.status_code == status.HTTP_403_FORBIDDEN
    assert accepted.json()["status"] == "accepted"
    assert twice.status_code == status.HTTP_409_CONFLICT
    assert client.get(f"/api/v1/users/{bob.id}/following").json()[0]["id"] == alice.id


def test_cancel_request(client, alice, alice_headers, bob_headers) -> None:
    client.put("/api/v1/users/me/privacy", json={"is_private": True}, headers=alice_headers)
    client.post(f"/api/v1/users/{alice.id}/follow", headers=bob_headers)

    first = client.delete(f"/api/v1/users/{alice.id}/follow-request", headers=bob_headers)
    second = client.delete(f"/api/v1/users/{alice.id}/follow-request", headers=bob_headers)

    assert first.json() == {"cancelled": True}
    assert second.json() == {"cancelled": False}
    assert client.get("/api/v1/follow-requests", headers=alice_headers).json() == []
