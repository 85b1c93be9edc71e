"""Tests for favorites sync between the local store and the database."""

import pytest

from hymnal.services.auth import NotSignedInError
from hymnal.services.favorites import FavoritesService
from hymnal.services.remote import RemoteDatabaseError


class TestLocalOnly:
    def test_add_and_remove(self, store):
        service = FavoritesService(store)

        service.add("001")
        service.add("002")
        service.add("001")
        service.remove("002")

        assert service.get() == ["001"]
        assert service.count() == 1

    def test_toggle(self, store):
        service = FavoritesService(store)

        assert service.toggle("010") is True
        assert service.is_favorite("010")
        assert service.toggle("010") is False
        assert not service.is_favorite("010")

    def test_guest_is_not_synced(self, store, fake_db, guest_session):
        service = FavoritesService(store, fake_db, guest_session)

        service.add("001")

        assert not service.is_synced
        assert fake_db.node("users/guest-1/favorites") is None

    def test_sync_requires_account(self, store, fake_db, guest_session):
        with pytest.raises(NotSignedInError):
            FavoritesService(store, fake_db, guest_session).sync_to_cloud()

    def test_clear_local(self, store):
        service = FavoritesService(store)
        service.save(["001", "002"])

        service.clear_local()

        assert service.get() == []


class TestSignedIn:
    def test_save_mirrors_remote_map(self, store, fake_db, user_session):
        service = FavoritesService(store, fake_db, user_session)

        service.save(["001", "010"])

        assert fake_db.node("users/user-1/favorites") == {"001": True, "010": True}
        assert store.get_favorites() == ["001", "010"]
        assert "token-1" in fake_db.tokens

    def test_remote_overwrites_local(self, store, fake_db, user_session):
        store.replace_favorites(["002"])
        fake_db.data = {"users": {"user-1": {"favorites": {"001": True, "003": True, "004": False}}}}

        numbers = FavoritesService(store, fake_db, user_session).get()

        assert sorted(numbers) == ["001", "003"]
        assert sorted(store.get_favorites()) == ["001", "003"]

    def test_empty_remote_keeps_local(self, store, fake_db, user_session):
        store.replace_favorites(["002"])

        assert FavoritesService(store, fake_db, user_session).get() == ["002"]

    def test_remote_error_falls_back_to_local(self, store, fake_db, user_session):
        store.replace_favorites(["002"])
        fake_db.fail_with = RemoteDatabaseError("offline")

        assert FavoritesService(store, fake_db, user_session).get() == ["002"]

    def test_remote_list_shape(self, store, fake_db, user_session):
        fake_db.data = {"users": {"user-1": {"favorites": [None, True, None, True]}}}

        assert FavoritesService(store, fake_db, user_session).get() == ["1", "3"]

    def test_add_uses_remote_state(self, store, fake_db, user_session):
        fake_db.data = {"users": {"user-1": {"favorites": {"001": True}}}}

        FavoritesService(store, fake_db, user_session).add("002")

        assert fake_db.node("users/user-1/favorites") == {"001": True, "002": True}

    def test_sync_pushes_local_then_pulls(self, store, fake_db, user_session):
        store.replace_favorites(["005", "006"])
        fake_db.data = {"users": {"user-1": {"favorites": {"001": True}}}}

        numbers = FavoritesService(store, fake_db, user_session).sync_to_cloud()

        assert numbers == ["005", "006"]
        assert fake_db.node("users/user-1/favorites") == {"005": True, "006": True}

    def test_sync_propagates_errors(self, store, fake_db, user_session):
        fake_db.fail_with = RemoteDatabaseError("offline")

        with pytest.raises(RemoteDatabaseError):
            FavoritesService(store, fake_db, user_session).sync_to_cloud()
