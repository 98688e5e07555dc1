"""Tests for configuration models and TOML loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tabsync.config import load_config
from tabsync.config.models import (
    PushDefaults,
    ServerProfile,
    SyncSettings,
    TabsyncConfig,
    ToolsConfig,
)

SAMPLE_TOML = """\
schema_dir = "db/schema"

[profiles.local]
host = "127.0.0.1"
user = "root"
description = "Laptop MySQL"

[profiles.staging]
host = "staging.db.internal"
port = 3307
user = "deploy"
password = "hunter2"

[push]
scratch_db = "tabsync_scratch"
retain_scratch = false
diff_concurrency = 4
on_diff_failure = "abort"

[tools]
diff_command = "/usr/local/bin/mysqldiff"
"""


# ============================================================================
# Models
# ============================================================================


class TestServerProfile:
    """Verify ServerProfile defaults and validation."""

    def test_defaults(self) -> None:
        profile = ServerProfile()
        assert (profile.host, profile.port, profile.user, profile.password) == (
            "localhost",
            3306,
            "root",
            None,
        )

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_port_range(self, port: int) -> None:
        with pytest.raises(ValidationError):
            ServerProfile(port=port)

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            ServerProfile().host = "elsewhere"


class TestSyncSettings:
    """Verify SyncSettings defaults and invariants."""

    def test_defaults(self, tmp_path: Path) -> None:
        settings = SyncSettings(live_db="shop", schema_dir=tmp_path)
        assert settings.scratch_db == "tmp"
        assert settings.retain_scratch is True
        assert settings.dry_run is False
        assert settings.diff_concurrency == 1
        assert settings.on_diff_failure == "skip"
        assert settings.push_script_path is None
        assert settings.tools == ToolsConfig()

    def test_scratch_must_differ_from_live(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="scratch database must differ"):
            SyncSettings(live_db="tmp", schema_dir=tmp_path)

    def test_live_db_required(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            SyncSettings(live_db="", schema_dir=tmp_path)

    def test_invalid_policy(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            SyncSettings(live_db="shop", schema_dir=tmp_path, on_diff_failure="ignore")

    def test_invalid_concurrency(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            SyncSettings(live_db="shop", schema_dir=tmp_path, diff_concurrency=0)

    def test_frozen(self, settings: SyncSettings) -> None:
        with pytest.raises(ValidationError):
            settings.dry_run = True

    def test_diff_exit_codes_default(self) -> None:
        assert ToolsConfig().diff_ok_exit_codes == (0, 1)


# ============================================================================
# Loader
# ============================================================================


class TestLoadConfig:
    """Verify load_config()."""

    def test_full_file(self, tmp_path: Path) -> None:
        path = tmp_path / "tabsync.toml"
        path.write_text(SAMPLE_TOML, encoding="utf-8")

        config = load_config(path)

        assert isinstance(config, TabsyncConfig)
        assert list(config.profiles) == ["local", "staging"]
        assert config.profiles["local"].description == "Laptop MySQL"
        assert config.profiles["staging"] == ServerProfile(
            host="staging.db.internal", port=3307, user="deploy", password="hunter2"
        )
        assert config.schema_dir == "db/schema"
        assert config.push == PushDefaults(
            scratch_db="tabsync_scratch",
            retain_scratch=False,
            diff_concurrency=4,
            on_diff_failure="abort",
        )
        assert config.tools.diff_command == "/usr/local/bin/mysqldiff"
        assert config.tools.dump_command == "mysqldump"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "tabsync.toml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == TabsyncConfig()

    def test_default_location(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "tabsync.toml").write_text(SAMPLE_TOML, encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert "staging" in load_config().profiles

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config not found"):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "tabsync.toml"
        path.write_text("[profiles.local\nhost = ", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid TOML"):
            load_config(path)

    def test_profile_not_a_table(self, tmp_path: Path) -> None:
        path = tmp_path / "tabsync.toml"
        path.write_text('[profiles]\nlocal = "127.0.0.1"\n', encoding="utf-8")
        with pytest.raises(ValueError, match="must be a table"):
            load_config(path)

    def test_invalid_profile_values(self, tmp_path: Path) -> None:
        """Pydantic errors are ValueError subclasses."""
        path = tmp_path / "tabsync.toml"
        path.write_text("[profiles.local]\nport = 70000\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)
