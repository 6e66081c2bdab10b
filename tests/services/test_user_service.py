"""Tests for the user/profile store."""

import pytest

from campus_threads.core.errors import AuthenticationRequired, AuthorizationDenied, NotFound
from campus_threads.schemas.common import MediaRef
from campus_threads.schemas.user import UserSync, UserUpdate
from campus_threads.services import user_service
from campus_threads.services.identity import get_current_user, get_current_user_or_throw
from tests.factories import create_user


def test_sync_user_creates_then_refreshes(db_session) -> None:
    data = UserSync(
        external_id="ext_1",
        email="eve@campus.test",
        first_name="Eve",
        last_name="Stone",
        image_url="https://provider.test/eve.png",
    )

    user, created = user_service.sync_user(db_session, data)
    again, created_again = user_service.sync_user(
        db_session,
        data.model_copy(update={"email": "eve@new.test", "image_url": "https://provider.test/eve2.png"}),
    )

    assert created is True
    assert created_again is False
    assert again.id == user.id
    assert again.username == "EveStone"
    assert again.followers_count == 0
    assert again.is_private is False
    assert again.email == "eve@new.test"
    assert again.avatar_value == "https://provider.test/eve2.png"


def test_sync_user_keeps_uploaded_avatar(db_session) -> None:
    user, _ = user_service.sync_user(db_session, UserSync(external_id="ext_2", email="f@campus.test"))
    user_service.update_avatar(db_session, user, MediaRef.handle("upload-7"))

    synced, _ = user_service.sync_user(
        db_session,
        UserSync(external_id="ext_2", email="f@campus.test", image_url="https://provider.test/f.png"),
    )

    assert synced.avatar_kind == "handle"
    assert synced.avatar_value == "upload-7"
    assert synced.username is None


def test_identity_resolver(db_session, alice) -> None:
    assert get_current_user(db_session, None) is None
    assert get_current_user(db_session, "nobody") is None
    assert get_current_user(db_session, alice.external_id).id == alice.id
    with pytest.raises(AuthenticationRequired):
        get_current_user_or_throw(db_session, "nobody")


def test_update_profile_only_self(db_session, alice, bob) -> None:
    updated = user_service.update_profile(
        db_session,
        alice,
        alice.id,
        UserUpdate(bio="CS '27", college="North Campus"),
    )

    assert updated.bio == "CS '27"
    assert updated.college == "North Campus"
    assert updated.first_name == "Alice"
    with pytest.raises(AuthorizationDenied):
        user_service.update_profile(db_session, bob, alice.id, UserUpdate(bio="hacked"))
    with pytest.raises(NotFound):
        user_service.update_profile(db_session, alice, 9999, UserUpdate(bio="x"))


def test_set_privacy(db_session, alice) -> None:
    assert user_service.set_privacy(db_session, alice, True).is_private is True
    assert user_service.set_privacy(db_session, alice, False).is_private is False


def test_search_users(db_session, alice, bob, carol) -> None:
    results = user_service.search_users(db_session, alice, "OKA")

    assert [user.id for user in results] == [bob.id]
    assert user_service.search_users(db_session, alice, "   ") == []
    assert alice.id not in {u.id for u in user_service.search_users(db_session, alice, "a")}


def test_search_treats_like_wildcards_literally(db_session, alice, bob, carol) -> None:
    percent = create_user(db_session, username="100%_real")

    assert user_service.search_users(db_session, alice, "%") == [percent]
    assert user_service.search_users(db_session, alice, "_") == [percent]
    assert user_service.search_users(db_session, alice, "0%_r") == [percent]


def test_recommended_users_by_followers(db_session, alice) -> None:
    popular = create_user(db_session, followers_count=10)
    middling = create_user(db_session, followers_count=3)

    results = user_service.get_recommended_users(db_session, alice, limit=2)

    assert [user.id for user in results] == [popular.id, middling.id]
