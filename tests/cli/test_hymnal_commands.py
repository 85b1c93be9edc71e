"""Tests for the hymnal CLI."""

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from hymnal import __version__
from hymnal.cli import common
from hymnal.cli.main import app
from hymnal.db.local_client import LocalStore
from hymnal.services.remote import RemoteDatabaseError
from hymnal.services.songs import SongValidationError

runner = CliRunner()


def invoke(config_file, *args):
    return runner.invoke(app, [*args, "--config", str(config_file)])


def track_stores(monkeypatch):
    """Record every LocalStore the commands open."""
    opened = []
    open_store = common.get_store

    def get_store(config):
        store = open_store(config)
        opened.append(store)
        return store

    monkeypatch.setattr(common, "get_store", get_store)
    return opened


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


class TestSongCommands:
    def test_list_uses_bundled_songs_offline(self, config_file, cli_db):
        result = invoke(config_file, "songs", "list")

        assert result.exit_code == 0
        assert "Amazing Grace" in result.output
        assert "Offline" in result.output

    def test_list_remote_songs(self, config_file, cli_db):
        cli_db.data = {"songs": {"500": {"number": "500", "title": "Remote Hymn", "verses": []}}}

        result = invoke(config_file, "songs", "list")

        assert result.exit_code == 0
        assert "Remote Hymn" in result.output
        assert "Amazing Grace" not in result.output
        assert "Offline" not in result.output

    def test_list_alphabetical(self, config_file, cli_db):
        result = invoke(config_file, "songs", "list", "--sort", "Alphabet")

        assert result.exit_code == 0
        assert result.output.index("Abide with Me") < result.output.index("Amazing Grace")
        assert result.output.index("Amazing Grace") < result.output.index("Rock of Ages")

    def test_list_invalid_sort(self, config_file, cli_db):
        result = invoke(config_file, "songs", "list", "--sort", "Composer")

        assert result.exit_code == 1
        assert "Unknown sort order" in result.output

    def test_favorites_filter_needs_account(self, config_file, cli_db, sign_in):
        sign_in(is_anonymous=True)

        result = invoke(config_file, "songs", "list", "--favorites")

        assert result.exit_code == 1
        assert "Sign in" in result.output

    def test_favorites_filter(self, config_file, cli_db, sign_in):
        sign_in()
        cli_db.data = {"users": {"user-1": {"favorites": {"003": True}}}}

        result = invoke(config_file, "songs", "list", "--favorites")

        assert result.exit_code == 0
        assert "Rock of Ages" in result.output
        assert "Amazing Grace" not in result.output

    def test_search(self, config_file, cli_db):
        result = invoke(config_file, "songs", "search", "grace")

        assert result.exit_code == 0
        assert "Amazing Grace" in result.output
        assert "Rock of Ages" not in result.output

    def test_search_no_match(self, config_file, cli_db):
        result = invoke(config_file, "songs", "search", "zzz")

        assert result.exit_code == 0
        assert "No songs match" in result.output

    def test_show(self, config_file, cli_db):
        result = invoke(config_file, "songs", "show", "001")

        assert result.exit_code == 0
        assert "Amazing Grace" in result.output
        assert "How sweet the sound" in result.output

    def test_show_missing(self, config_file, cli_db):
        result = invoke(config_file, "songs", "show", "999")

        assert result.exit_code == 1
        assert "Song not found" in result.output

    def test_random(self, config_file, cli_db):
        result = invoke(config_file, "songs", "random")

        assert result.exit_code == 0
        assert "Verse of the Day" in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["songs", "list", "--config", str(tmp_path / "nope.toml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_list_closes_local_store(self, config_file, cli_db, monkeypatch):
        opened = track_stores(monkeypatch)

        result = invoke(config_file, "songs", "list")

        assert result.exit_code == 0
        assert opened
        assert all(store._connection is None for store in opened)

    def test_unreadable_catalog_leaves_no_open_store(self, config_file, cli_db, monkeypatch):
        opened = track_stores(monkeypatch)
        repository = MagicMock()
        repository.get_songs.side_effect = SongValidationError("Invalid song file")
        monkeypatch.setattr(common, "get_repository", lambda config: repository)

        result = invoke(config_file, "songs", "list")

        assert result.exit_code == 1
        assert "Invalid song file" in result.output
        assert all(store._connection is None for store in opened)


class TestFavoriteCommands:
    def test_add_and_list_offline(self, config_file, cli_db, local_db_path):
        result = invoke(config_file, "favorites", "add", "001")

        assert result.exit_code == 0
        with LocalStore(local_db_path) as store:
            assert store.get_favorites() == ["001"]

        listed = invoke(config_file, "favorites", "list")
        assert "Amazing Grace" in listed.output

    def test_add_unknown_song(self, config_file, cli_db):
        result = invoke(config_file, "favorites", "add", "999")

        assert result.exit_code == 1
        assert "Song not found" in result.output

    def test_toggle_mirrors_when_signed_in(self, config_file, cli_db, sign_in):
        sign_in()

        result = invoke(config_file, "favorites", "toggle", "002")

        assert result.exit_code == 0
        assert "Added song 002" in result.output
        assert cli_db.node("users/user-1/favorites") == {"002": True}

        result = invoke(config_file, "favorites", "toggle", "002")
        assert "Removed song 002" in result.output

    def test_remove_not_favorite(self, config_file, cli_db):
        result = invoke(config_file, "favorites", "remove", "001")

        assert result.exit_code == 0
        assert "not a favorite" in result.output

    def test_list_empty(self, config_file, cli_db):
        result = invoke(config_file, "favorites", "list")

        assert "No favorite songs yet" in result.output

    def test_sync_requires_sign_in(self, config_file, cli_db):
        result = invoke(config_file, "favorites", "sync")

        assert result.exit_code == 1
        assert "You need to sign in first" in result.output

    def test_sync(self, config_file, cli_db, sign_in, local_db_path):
        sign_in()
        with LocalStore(local_db_path) as store:
            store.replace_favorites(["001", "010"])

        result = invoke(config_file, "favorites", "sync")

        assert result.exit_code == 0
        assert "Synced 2 favorites" in result.output
        assert cli_db.node("users/user-1/favorites") == {"001": True, "010": True}


SIGN_IN_RESPONSE = {
    "localId": "user-1",
    "email": "singer@example.com",
    "displayName": "Singer",
    "idToken": "id-token",
    "refreshToken": "refresh-token",
}


def make_response(json_data, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    return response


class TestAuthCommands:
    @patch("hymnal.services.auth.requests.post")
    def test_login(self, mock_post, config_file, cli_db, local_db_path):
        mock_post.return_value = make_response(SIGN_IN_RESPONSE)

        result = invoke(config_file, "auth", "login", "--email", "singer@example.com", "--password", "secret1")

        assert result.exit_code == 0
        assert "Welcome back, Singer!" in result.output
        with LocalStore(local_db_path) as store:
            assert store.load_session().uid == "user-1"

    @patch("hymnal.services.auth.requests.post")
    def test_login_when_user_document_is_unwritable(self, mock_post, config_file, cli_db, local_db_path):
        cli_db.fail_with = RemoteDatabaseError("permission denied", 403)
        mock_post.return_value = make_response(SIGN_IN_RESPONSE)

        result = invoke(config_file, "auth", "login", "--email", "singer@example.com", "--password", "secret1")

        assert result.exit_code == 0
        assert "Welcome back, Singer!" in result.output
        with LocalStore(local_db_path) as store:
            assert store.load_session().uid == "user-1"

    @patch("hymnal.services.auth.requests.post")
    def test_login_wrong_password(self, mock_post, config_file, cli_db):
        mock_post.return_value = make_response({"error": {"message": "INVALID_PASSWORD"}}, 400)

        result = invoke(config_file, "auth", "login", "--email", "singer@example.com", "--password", "nope")

        assert result.exit_code == 1
        assert "Incorrect password. Please try again" in result.output

    @patch("hymnal.services.auth.requests.post")
    def test_guest(self, mock_post, config_file, cli_db, local_db_path):
        mock_post.return_value = make_response({"localId": "guest-1", "idToken": "g", "refreshToken": "r"})

        result = invoke(config_file, "auth", "guest")

        assert result.exit_code == 0
        with LocalStore(local_db_path) as store:
            assert store.load_session().is_anonymous

    def test_logout_clears_favorites(self, config_file, cli_db, sign_in, local_db_path):
        sign_in()
        with LocalStore(local_db_path) as store:
            store.replace_favorites(["001"])

        result = invoke(config_file, "auth", "logout")

        assert result.exit_code == 0
        with LocalStore(local_db_path) as store:
            assert store.load_session() is None
            assert store.get_favorites() == []

    def test_whoami(self, config_file, cli_db, sign_in):
        sign_in()
        cli_db.data = {"users": {"user-1": {"role": "admin"}}}

        result = invoke(config_file, "auth", "whoami")

        assert result.exit_code == 0
        assert "singer@example.com" in result.output
        assert "admin" in result.output

    def test_whoami_signed_out(self, config_file, cli_db):
        result = invoke(config_file, "auth", "whoami")

        assert "Not signed in" in result.output

    def test_missing_api_key(self, tmp_path, cli_db):
        config_path = tmp_path / "bare.toml"
        config_path.write_text(f'[logging]\ndir = "{(tmp_path / "logs").as_posix()}"\n')

        result = runner.invoke(app, ["auth", "guest", "--config", str(config_path)])

        assert result.exit_code == 1
        assert "Online features are not configured" in result.output


class TestSettingsCommands:
    def test_font_size_out_of_range(self, config_file):
        result = invoke(config_file, "settings", "font-size", "40")

        assert result.exit_code == 1
        assert "Font size must be between 12 and 30" in result.output

    def test_update_and_show(self, config_file):
        assert invoke(config_file, "settings", "font-size", "20").exit_code == 0
        assert invoke(config_file, "settings", "theme", "dark").exit_code == 0
        assert invoke(config_file, "settings", "align", "center").exit_code == 0

        result = invoke(config_file, "settings", "show")

        assert "20" in result.output
        assert "Dark" in result.output
        assert "center" in result.output

    def test_theme_toggle(self, config_file):
        result = invoke(config_file, "settings", "theme")

        assert "Theme set to dark" in result.output

    def test_invalid_alignment(self, config_file):
        result = invoke(config_file, "settings", "align", "middle")

        assert result.exit_code == 1
        assert "Invalid alignment" in result.output


class TestOnlineCommands:
    def test_announcements(self, config_file, cli_db):
        cli_db.data = {
            "app_config": {
                "announcements": {
                    "a": {"title": "Choir practice", "content": "Thursday 7pm", "isActive": True},
                    "b": {"title": "Hidden", "content": "x", "isActive": False},
                }
            }
        }

        result = invoke(config_file, "announcements")

        assert result.exit_code == 0
        assert "Choir practice" in result.output
        assert "Hidden" not in result.output

    def test_announcements_need_firebase(self, tmp_path):
        config_path = tmp_path / "bare.toml"
        config_path.write_text(f'[logging]\ndir = "{(tmp_path / "logs").as_posix()}"\n')

        result = runner.invoke(app, ["announcements", "--config", str(config_path)])

        assert result.exit_code == 1
        assert "Firebase is not configured" in result.output

    def test_report(self, config_file, cli_db, sign_in):
        sign_in()

        result = invoke(config_file, "report", "001", "--issue", "Spelling Error", "--description", "typo")

        assert result.exit_code == 0
        reports = cli_db.node("song_reports")
        assert len(reports) == 1
        assert list(reports.values())[0]["songTitle"] == "Amazing Grace"

    def test_report_invalid_issue(self, config_file, cli_db, sign_in):
        sign_in()

        result = invoke(config_file, "report", "001", "--issue", "Too loud", "--description", "x")

        assert result.exit_code == 1
        assert "Invalid issue type" in result.output

    def test_collections(self, config_file, cli_db):
        cli_db.data = {
            "song_collections": {
                "easter": {"name": "Easter", "access_level": "public", "status": "active", "song_count": 1},
                "vip": {"name": "Members", "access_level": "registered", "status": "active"},
            },
            "collection_songs": {"easter": {"003": {"number": "003", "title": "Rock of Ages"}}},
        }

        listed = invoke(config_file, "collections", "list")
        shown = invoke(config_file, "collections", "show", "easter")
        denied = invoke(config_file, "collections", "show", "vip")

        assert "Easter" in listed.output
        assert "Members" not in listed.output
        assert "Rock of Ages" in shown.output
        assert denied.exit_code == 1
        assert "Please sign in to view this collection" in denied.output

    @patch("typer.launch")
    def test_open_donate(self, mock_launch, config_file):
        result = invoke(config_file, "open", "donate")

        assert result.exit_code == 0
        mock_launch.assert_called_once()


class TestConfigCommand:
    def test_path(self, tmp_path):
        result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert "config.toml" in result.output.replace("\n", "")

    def test_set_and_show(self):
        result = runner.invoke(app, ["config", "set", "roles.timeout_seconds", "5"])
        assert result.exit_code == 0

        result = runner.invoke(app, ["config", "show"])
        assert "5s" in result.output

    def test_set_invalid_key(self):
        result = runner.invoke(app, ["config", "set", "nope.key", "1"])

        assert result.exit_code == 1
        assert "Invalid config key" in result.output

    def test_unknown_action(self):
        result = runner.invoke(app, ["config", "explode"])

        assert result.exit_code == 1
        assert "Unknown action" in result.output
