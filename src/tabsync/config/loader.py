"""TOML configuration loading."""

import tomllib
from pathlib import Path

from tabsync.config.models import PushDefaults, ServerProfile, TabsyncConfig, ToolsConfig

DEFAULT_CONFIG_FILE = "tabsync.toml"


def load_config(config_path: Path | str | None = None) -> TabsyncConfig:
    """Load server profiles and defaults from a TOML file.

    Expected layout::

        schema_dir = "schema"

        [profiles.local]
        host = "127.0.0.1"
        user = "root"

        [push]
        scratch_db = "tabsync_scratch"
        retain_scratch = false

        [tools]
        diff_command = "/usr/local/bin/mysqldiff"

    Args:
        config_path: Path to the TOML file (default: ``tabsync.toml`` in the
            current directory).

    Returns:
        TabsyncConfig with all profiles and defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config format is invalid.
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Config not found: {config_path}\n"
            f"Create {DEFAULT_CONFIG_FILE} with a [profiles.<name>] table "
            f"or pass --host/--user/--password instead."
        )

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        if not isinstance(profile_data, dict):
            raise ValueError(f"Profile '{name}' must be a table in {config_path}")
        profiles[name] = ServerProfile(**profile_data)

    return TabsyncConfig(
        profiles=profiles,
        schema_dir=data.get("schema_dir"),
        push=PushDefaults(**data.get("push", {})),
        tools=ToolsConfig(**data.get("tools", {})),
    )
