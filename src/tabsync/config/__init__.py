"""Configuration management: profiles, TOML loading, and settings models.

Usage:
    >>> from tabsync.config import load_config, ServerProfile, SyncSettings
"""

from tabsync.config.loader import load_config
from tabsync.config.models import (
    PushDefaults,
    ServerProfile,
    SyncSettings,
    TabsyncConfig,
    ToolsConfig,
)

__all__ = [
    "load_config",
    "PushDefaults",
    "ServerProfile",
    "SyncSettings",
    "TabsyncConfig",
    "ToolsConfig",
]
