"""Pydantic models for server profiles and run settings."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Configuration Models
# ============================================================================


DiffFailurePolicy = Literal["skip", "keep", "abort"]


class ServerProfile(BaseModel):
    """MySQL server connection profile from tabsync.toml."""

    model_config = ConfigDict(frozen=True)

    host: str = "localhost"
    port: int = Field(default=3306, ge=1, le=65535)
    user: str = "root"
    password: str | None = None
    description: str = ""


class ToolsConfig(BaseModel):
    """External command-line tools used for diffing and dumping."""

    model_config = ConfigDict(frozen=True)

    diff_command: str = "mysqldiff"
    dump_command: str = "mysqldump"
    # mysqldiff exits 1 when it found differences
    diff_ok_exit_codes: tuple[int, ...] = (0, 1)


class PushDefaults(BaseModel):
    """Defaults for the push command, read from the ``[push]`` table."""

    model_config = ConfigDict(frozen=True)

    scratch_db: str = "tmp"
    retain_scratch: bool = True
    diff_concurrency: int = Field(default=1, ge=1)
    on_diff_failure: DiffFailurePolicy = "skip"


class TabsyncConfig(BaseModel):
    """Complete configuration from tabsync.toml."""

    model_config = ConfigDict(frozen=True)

    profiles: dict[str, ServerProfile] = Field(default_factory=dict)
    schema_dir: str | None = None
    push: PushDefaults = Field(default_factory=PushDefaults)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)


class SyncSettings(BaseModel):
    """Immutable settings for a single push or pull run.

    Built once by the CLI (or by the caller) and passed explicitly into
    every stage.

    Example:
        >>> settings = SyncSettings(live_db="shop", schema_dir=Path("schema"))
        >>> settings.scratch_db
        'tmp'
    """

    model_config = ConfigDict(frozen=True)

    server: ServerProfile = Field(default_factory=ServerProfile)
    live_db: str = Field(min_length=1)
    schema_dir: Path
    scratch_db: str = Field(default="tmp", min_length=1)
    retain_scratch: bool = True
    push_script_path: Path | None = None
    dry_run: bool = False
    diff_concurrency: int = Field(default=1, ge=1)
    on_diff_failure: DiffFailurePolicy = "skip"
    tools: ToolsConfig = Field(default_factory=ToolsConfig)

    @model_validator(mode="after")
    def _scratch_is_not_live(self) -> "SyncSettings":
        if self.scratch_db == self.live_db:
            raise ValueError(
                f"scratch database must differ from the live database ({self.live_db!r})"
            )
        return self
