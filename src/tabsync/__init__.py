"""tabsync: keep a directory of per-table MySQL schema files in sync with a live database.

``push`` loads the ``<table>.sql`` files into a scratch database, works out
which tables to create, drop or alter, and applies the resulting script to
the live database.  ``pull`` regenerates the files from the live database.

Usage:
    from tabsync import SyncSettings, run_push, run_pull
    from tabsync import reconcile, assemble_push_script
"""

__version__ = "0.1.0"

# Adapters
from tabsync.adapters.base import DatabaseClient
from tabsync.adapters.mysql import AsyncMySQLAdapter

# Config
from tabsync.config.loader import load_config
from tabsync.config.models import ServerProfile, SyncSettings, TabsyncConfig

# Factory
from tabsync.factory import ProfileNotFoundError, get_adapter, resolve_profile

# Schema
from tabsync.schema.comparator import reconcile
from tabsync.schema.models import PullResult, PushResult, PushScript, ReconciliationResult
from tabsync.schema.script import assemble_push_script

# Pipelines
from tabsync.pull import run_pull
from tabsync.push import run_push

__all__ = [
    # Adapters
    "DatabaseClient",
    "AsyncMySQLAdapter",
    # Config
    "load_config",
    "ServerProfile",
    "SyncSettings",
    "TabsyncConfig",
    # Factory
    "get_adapter",
    "resolve_profile",
    "ProfileNotFoundError",
    # Schema
    "reconcile",
    "assemble_push_script",
    "ReconciliationResult",
    "PushScript",
    "PushResult",
    "PullResult",
    # Pipelines
    "run_push",
    "run_pull",
]
