"""Shared fixtures for hymnal tests."""

import copy
from pathlib import Path

import pytest

from hymnal.core.paths import get_bundled_songs_path
from hymnal.db.local_client import LocalStore
from hymnal.db.models import Session, Song, Verse


class FakeRealtimeDatabase:
    """In-memory stand-in for RealtimeDatabaseClient.

    Nodes are nested dicts; writing None or {} removes a node like the real
    database does. `with_token` records the token and shares the same data.
    """

    def __init__(self, data=None):
        self.data = data if data is not None else {}
        self.base_url = "https://test.firebaseio.com"
        self.timeout = 15
        self.auth_token = None
        self.tokens = []
        self.calls = []
        self.fail_with = None
        self._counter = 0

    def with_token(self, auth_token):
        self.tokens.append(auth_token)
        return self

    @staticmethod
    def _parts(path):
        return [p for p in path.strip("/").split("/") if p]

    def get(self, path, timeout=None):
        self.calls.append(("GET", path, timeout))
        if self.fail_with is not None:
            raise self.fail_with
        node = self.data
        for part in self._parts(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def set(self, path, value):
        self.calls.append(("PUT", path, value))
        self._write(path, value)

    def _write(self, path, value):
        if value is None or value == {}:
            self._remove(path)
            return
        parts = self._parts(path)
        if not parts:
            self.data = copy.deepcopy(value)
            return
        node = self.data
        for part in parts[:-1]:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = copy.deepcopy(value)

    def update(self, path, values):
        self.calls.append(("PATCH", path, values))
        for key, value in values.items():
            self._write(f"{path}/{key}", value)

    def delete(self, path):
        self.calls.append(("DELETE", path, None))
        self._remove(path)

    def _remove(self, path):
        parts = self._parts(path)
        if not parts:
            self.data = {}
            return
        node = self.data
        for part in parts[:-1]:
            if not isinstance(node, dict) or part not in node:
                return
            node = node[part]
        if isinstance(node, dict):
            node.pop(parts[-1], None)

    def push(self, path, value):
        self._counter += 1
        key = f"-key{self._counter:04d}"
        self.calls.append(("POST", path, value))
        self._write(f"{path}/{key}", value)
        return key

    def node(self, path):
        """Read a node without recording a call."""
        node = self.data
        for part in self._parts(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep config, data and logs inside tmp_path."""
    monkeypatch.setenv("HYMNAL_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "HYMNAL_FIREBASE_API_KEY",
        "HYMNAL_FIREBASE_DATABASE_URL",
        "HYMNAL_DB_PATH",
        "HYMNAL_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_db():
    return FakeRealtimeDatabase()


@pytest.fixture
def tmp_db_path(tmp_path):
    """Temporary SQLite database path."""
    return tmp_path / "hymnal.db"


@pytest.fixture
def store(tmp_db_path):
    client = LocalStore(tmp_db_path)
    yield client
    client.close()


@pytest.fixture
def user_session():
    return Session(
        uid="user-1",
        email="singer@example.com",
        display_name="Singer",
        id_token="token-1",
        refresh_token="refresh-1",
    )


@pytest.fixture
def guest_session():
    return Session(uid="guest-1", id_token="guest-token", is_anonymous=True)


@pytest.fixture
def sample_songs():
    return [
        Song("010", "Abide with Me", [Verse("1", "Abide with me; fast falls the eventide")]),
        Song("002", "holy, Holy, Holy", [Verse("1", "Holy, holy, holy! Lord God Almighty!")]),
        Song("001", "Amazing Grace", [Verse("1", "Amazing grace! How sweet the sound"), Verse("2", "'Twas grace")]),
        Song("A1", "Be Thou My Vision", []),
    ]


@pytest.fixture
def bundled_songs_path() -> Path:
    return get_bundled_songs_path()


@pytest.fixture
def config_file(tmp_path, bundled_songs_path):
    """Config file pointing at tmp storage and a test database URL."""
    path = tmp_path / "config.toml"
    path.write_text(
        "[firebase]\n"
        'database_url = "https://test.firebaseio.com"\n'
        'api_key = "test-api-key"\n'
        "\n[songs]\n"
        f'bundled_path = "{bundled_songs_path.as_posix()}"\n'
        "\n[database]\n"
        f'path = "{(tmp_path / "hymnal.db").as_posix()}"\n'
        "\n[logging]\n"
        f'dir = "{(tmp_path / "logs").as_posix()}"\n'
    )
    return path
