"""Database client factory.

Resolves a ``ServerProfile`` from the TOML config, the environment, or
explicit overrides, and turns it into connected ``DatabaseClient`` instances
bound to a given database (or to the bare server).
"""

import logging
import os

from sqlalchemy.engine import URL

from tabsync.adapters.base import DatabaseClient
from tabsync.adapters.mysql import AsyncMySQLAdapter
from tabsync.config.models import ServerProfile, TabsyncConfig

logger = logging.getLogger(__name__)

PROFILE_ENV_VAR = "TABSYNC_PROFILE"
PASSWORD_ENV_VAR = "TABSYNC_PASSWORD"


class ProfileNotFoundError(Exception):
    """Raised when a requested server profile is not configured."""

    pass


def get_active_profile_name(profile_name: str | None = None) -> str | None:
    """Get the profile name from the argument or ``TABSYNC_PROFILE``.

    Returns:
        Profile name, or None when neither is set.
    """
    if profile_name:
        return profile_name
    return os.environ.get(PROFILE_ENV_VAR) or None


def resolve_profile(
    config: TabsyncConfig | None,
    profile_name: str | None = None,
    **overrides: object,
) -> ServerProfile:
    """Resolve the server profile for this run.

    Precedence: explicit overrides (CLI flags) > ``TABSYNC_PASSWORD`` for the
    password > named profile > built-in defaults.  Overrides whose value is
    None are ignored.

    Raises:
        ProfileNotFoundError: If a profile was requested but is not in config.
    """
    name = get_active_profile_name(profile_name)
    base = ServerProfile()
    if name is not None:
        if config is None or name not in config.profiles:
            available = ", ".join(config.profiles) if config and config.profiles else "none"
            raise ProfileNotFoundError(
                f"Profile '{name}' not found. Available: {available}"
            )
        base = config.profiles[name]

    updates = {k: v for k, v in overrides.items() if v is not None}
    if "password" not in updates and base.password is None:
        env_password = os.environ.get(PASSWORD_ENV_VAR)
        if env_password:
            updates["password"] = env_password

    if not updates:
        return base
    # Re-validate so overrides go through the same field checks
    return ServerProfile(**{**base.model_dump(), **updates})


def build_url(profile: ServerProfile, database: str | None = None) -> URL:
    """Build an ``mysql+aiomysql`` URL for a profile.

    Args:
        profile: Server connection profile.
        database: Database to bind the connection to, or None for a
            server-level connection (used to drop/create databases).
    """
    return URL.create(
        drivername="mysql+aiomysql",
        username=profile.user,
        password=profile.password,
        host=profile.host,
        port=profile.port,
        database=database,
    )


async def get_adapter(profile: ServerProfile, database: str | None = None) -> DatabaseClient:
    """Create a new adapter for ``database`` on the profile's server.

    No caching: each call returns an independent single-connection client.
    """
    logger.debug(
        "Creating adapter for %s@%s:%s/%s",
        profile.user,
        profile.host,
        profile.port,
        database or "",
    )
    return AsyncMySQLAdapter(build_url(profile, database))
