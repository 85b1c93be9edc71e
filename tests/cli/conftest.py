"""Fixtures for CLI tests."""

import pytest

from hymnal.cli import common
from hymnal.db.local_client import LocalStore
from hymnal.db.models import Session


@pytest.fixture
def cli_db(fake_db, monkeypatch):
    """Route every command's database client to the in-memory fake."""
    monkeypatch.setattr(common, "get_db", lambda config: fake_db if config.has_firebase else None)
    return fake_db


@pytest.fixture
def local_db_path(tmp_path):
    return tmp_path / "hymnal.db"


@pytest.fixture
def sign_in(local_db_path):
    """Store a session as if `hymnal auth login` had run."""

    def _sign_in(uid="user-1", email="singer@example.com", is_anonymous=False):
        session = Session(
            uid=uid,
            email=email,
            display_name="Singer",
            id_token=f"tok-{uid}",
            refresh_token="refresh",
            is_anonymous=is_anonymous,
        )
        with LocalStore(local_db_path) as store:
            store.save_session(session)
        return session

    return _sign_in
