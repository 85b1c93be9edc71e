"""Helpers shared by the hymnal and hymnal-admin commands.

Builds configuration, stores and clients from config, and turns exceptions
into the short messages shown to users.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from hymnal.core.config import HymnalConfig, ensure_config_exists
from hymnal.core.logging_config import get_logger, setup_logging
from hymnal.db.local_client import LocalStore
from hymnal.db.models import Role, Session
from hymnal.services.announcements import AnnouncementError
from hymnal.services.auth import AuthClient, AuthError
from hymnal.services.collections import ACCESS_MESSAGES, CollectionError, Viewer
from hymnal.services.remote import RealtimeDatabaseClient, RemoteDatabaseError, RemoteTimeoutError
from hymnal.services.reports import ReportError
from hymnal.services.roles import InvalidRoleError, RoleResolver
from hymnal.services.settings import PreferenceError
from hymnal.services.songs import SongRepository, SongValidationError

console = Console()
logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again"


def describe_error(exc: Exception) -> str:
    """Get the message shown to the user for an exception.

    Auth errors use the fixed error-code table; unexpected exceptions get a
    generic message.
    """
    if isinstance(exc, AuthError):
        return str(exc)
    if isinstance(exc, RemoteTimeoutError):
        return "The server took too long to respond. Please try again"
    if isinstance(exc, RemoteDatabaseError):
        if exc.status_code in (401, 403):
            return "You don't have permission to do that. Try signing in again"
        return "Could not reach the song database. Please check your internet connection"
    if isinstance(exc, CollectionError):
        return ACCESS_MESSAGES.get(str(exc), str(exc))
    if isinstance(exc, (SongValidationError, AnnouncementError, ReportError, PreferenceError, InvalidRoleError)):
        return str(exc)
    if isinstance(exc, FileNotFoundError):
        return str(exc)
    return GENERIC_ERROR_MESSAGE


def fail(exc: Exception) -> None:
    """Print the user-facing message for `exc` and exit with status 1."""
    logger.error("Command failed: %r", exc)
    console.print(f"[red]{describe_error(exc)}[/red]")
    raise typer.Exit(1)


def load_config(config_path: Optional[Path] = None) -> HymnalConfig:
    """Load configuration and start file logging.

    Args:
        config_path: Explicit config file; the default one is created if needed
    """
    if config_path:
        try:
            config = HymnalConfig.load(config_path)
        except FileNotFoundError:
            console.print(f"[red]Config file not found: {config_path}[/red]")
            raise typer.Exit(1)
    else:
        config = ensure_config_exists()

    setup_logging(config.log_dir, config.log_level)
    return config


def get_store(config: HymnalConfig) -> LocalStore:
    return LocalStore(config.db_path)


def get_db(config: HymnalConfig) -> Optional[RealtimeDatabaseClient]:
    """Get a Realtime Database client, or None when Firebase isn't configured."""
    if not config.has_firebase:
        return None
    return RealtimeDatabaseClient(config.firebase_database_url, timeout=config.firebase_timeout_seconds)


def require_db(config: HymnalConfig) -> RealtimeDatabaseClient:
    db = get_db(config)
    if db is None:
        console.print("[red]Firebase is not configured.[/red]")
        console.print("Run 'hymnal config set firebase.database_url <url>' first.")
        raise typer.Exit(1)
    return db


def get_auth_client(config: HymnalConfig) -> AuthClient:
    try:
        return AuthClient(config.firebase_api_key, get_db(config), timeout=config.firebase_timeout_seconds)
    except AuthError as e:
        fail(e)


def get_repository(config: HymnalConfig) -> SongRepository:
    return SongRepository(get_db(config), config.songs_bundled_path, prefer_remote=config.songs_prefer_remote)


def get_role_resolver(config: HymnalConfig) -> RoleResolver:
    return RoleResolver(
        get_db(config),
        admin_emails=config.admin_emails,
        super_admin_emails=config.super_admin_emails,
        timeout_seconds=config.roles_timeout_seconds,
        cache_ttl_seconds=config.roles_cache_ttl_seconds,
    )


def require_session(store: LocalStore, allow_guest: bool = False) -> Session:
    """Get the stored session or exit.

    Args:
        store: Local store holding the session
        allow_guest: Accept anonymous sessions
    """
    session = store.load_session()
    if session is None or (session.is_anonymous and not allow_guest):
        console.print("[red]You need to sign in first.[/red]")
        console.print("Run 'hymnal auth login' to sign in.")
        raise typer.Exit(1)
    return session


def get_viewer(config: HymnalConfig, session: Optional[Session]) -> Viewer:
    """Describe the current user for collection access checks."""
    if session is None:
        return Viewer()

    status = get_role_resolver(config).resolve(session)
    is_premium = False
    db = get_db(config)
    if db is not None and session.is_logged_in:
        try:
            record = db.with_token(session.id_token).get(f"users/{session.uid}")
        except RemoteDatabaseError as e:
            logger.warning("Could not read premium flag: %s", e)
        else:
            is_premium = isinstance(record, dict) and record.get("isPremium") is True

    return Viewer(
        is_signed_in=True,
        is_anonymous=session.is_anonymous,
        role=status.role,
        is_premium=is_premium,
    )


def require_admin(config: HymnalConfig, required: Role = Role.ADMIN) -> tuple[Session, RealtimeDatabaseClient]:
    """Get the stored session and an authenticated client, or exit unless it holds `required`.

    Returns:
        (session, database client authenticated as the session)
    """
    db = require_db(config)
    with get_store(config) as store:
        session = require_session(store)

    result = get_role_resolver(config).check_role(session, required)
    if not result.authorized:
        console.print(f"[red]Access denied: {result.reason}[/red]")
        console.print(f"[dim]Signed in as {session.label} ({result.role.value})[/dim]")
        raise typer.Exit(1)

    return session, db.with_token(session.id_token)
