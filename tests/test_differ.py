"""Tests for the mysqldiff-backed TableDiffer and command helpers."""

import logging
import sys
from unittest.mock import AsyncMock

import pytest

from tabsync.commands import CommandResult, mask_password, run_command
from tabsync.config.models import ServerProfile, SyncSettings, ToolsConfig
from tabsync.schema.differ import DiffFailedError, TableDiffer
from tabsync.schema.models import DiffOutcome

ALTER_ORDERS = "ALTER TABLE `shop`.`orders` ADD COLUMN `note` text NULL;\n"


def _runner(returncode: int = 0, stdout: str = "", stderr: str = "") -> AsyncMock:
    return AsyncMock(return_value=CommandResult(returncode=returncode, stdout=stdout, stderr=stderr))


# ============================================================================
# Command line
# ============================================================================


class TestBuildCommand:
    """Verify the mysqldiff argument vector."""

    def test_with_password(self, settings: SyncSettings) -> None:
        argv = TableDiffer(settings).build_command("orders")
        assert argv == [
            "mysqldiff",
            "--server1=deploy:s3cret@db.local:3306",
            "--compact",
            "--difftype=sql",
            "--changes-for=server1",
            "shop.orders:tmp.orders",
        ]

    def test_without_password(self, settings: SyncSettings) -> None:
        settings = settings.model_copy(update={"server": ServerProfile(user="root")})
        argv = TableDiffer(settings).build_command("users")
        assert argv[1] == "--server1=root@localhost:3306"

    def test_custom_tool_and_scratch(self, settings: SyncSettings) -> None:
        settings = settings.model_copy(
            update={"tools": ToolsConfig(diff_command="/opt/bin/mysqldiff"), "scratch_db": "mirror"}
        )
        argv = TableDiffer(settings).build_command("users")
        assert argv[0] == "/opt/bin/mysqldiff"
        assert argv[-1] == "shop.users:mirror.users"


class TestPasswordWarning:
    """Verify passwords mysqldiff cannot parse are reported."""

    @pytest.mark.parametrize("password", ["p@ss", "pa:ss"])
    def test_unsafe_password_warns(
        self, settings: SyncSettings, password: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        settings = settings.model_copy(update={"server": ServerProfile(password=password)})
        with caplog.at_level(logging.WARNING, logger="tabsync.schema.differ"):
            TableDiffer(settings)
        assert "cannot parse it in --server1" in caplog.text
        assert password not in caplog.text

    def test_plain_password_is_quiet(self, settings: SyncSettings, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="tabsync.schema.differ"):
            TableDiffer(settings)
        assert caplog.text == ""


# ============================================================================
# Outcomes
# ============================================================================


class TestDiff:
    """Verify TableDiffer.diff() outcome classification."""

    @pytest.mark.asyncio
    async def test_identical_tables(self, settings: SyncSettings) -> None:
        runner = _runner(returncode=0, stdout="")
        outcome = await TableDiffer(settings, runner=runner).diff("orders")
        assert outcome == DiffOutcome(table="orders", ok=True, output="", returncode=0)
        runner.assert_awaited_once_with(TableDiffer(settings).build_command("orders"))

    @pytest.mark.asyncio
    async def test_differences_exit_one(self, settings: SyncSettings) -> None:
        """mysqldiff exits 1 when it found differences; still a success."""
        outcome = await TableDiffer(settings, runner=_runner(1, ALTER_ORDERS)).diff("orders")
        assert outcome.ok is True
        assert outcome.output == ALTER_ORDERS
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_unexpected_exit_code(self, settings: SyncSettings) -> None:
        outcome = await TableDiffer(settings, runner=_runner(2, "", "")).diff("orders")
        assert outcome.ok is False
        assert outcome.error == "exited with status 2"
        assert outcome.returncode == 2

    @pytest.mark.asyncio
    async def test_unexpected_exit_code_with_stderr(self, settings: SyncSettings) -> None:
        runner = _runner(2, "", "ERROR: Access denied for user 'deploy'\n")
        outcome = await TableDiffer(settings, runner=runner).diff("orders")
        assert outcome.ok is False
        assert outcome.error == "ERROR: Access denied for user 'deploy'"

    @pytest.mark.asyncio
    async def test_stderr_is_failure(self, settings: SyncSettings) -> None:
        """Anything on stderr counts as a failure even with an accepted exit code."""
        runner = _runner(1, "# partial\n", "ERROR: The object shop.orders does not exist.")
        outcome = await TableDiffer(settings, runner=runner).diff("orders")
        assert outcome.ok is False
        assert outcome.output == "# partial\n"
        assert "does not exist" in outcome.error

    @pytest.mark.asyncio
    async def test_custom_accepted_exit_codes(self, settings: SyncSettings) -> None:
        settings = settings.model_copy(update={"tools": ToolsConfig(diff_ok_exit_codes=(0,))})
        outcome = await TableDiffer(settings, runner=_runner(1, ALTER_ORDERS)).diff("orders")
        assert outcome.ok is False

    @pytest.mark.asyncio
    async def test_tool_not_installed(self, settings: SyncSettings) -> None:
        runner = AsyncMock(side_effect=FileNotFoundError("No such file or directory: 'mysqldiff'"))
        outcome = await TableDiffer(settings, runner=runner).diff("orders")
        assert outcome.ok is False
        assert outcome.error.startswith("cannot run mysqldiff")

    def test_failed_error_message(self) -> None:
        outcome = DiffOutcome(table="orders", ok=False, error="boom")
        error = DiffFailedError(outcome)
        assert error.outcome is outcome
        assert str(error) == "Structural diff of `orders` failed: boom"


# ============================================================================
# Command helpers
# ============================================================================


class TestCommands:
    """Verify run_command() and mask_password()."""

    def test_mask_password(self) -> None:
        argv = ["mysqldiff", "--server1=root:hunter2@localhost:3306", "shop.a:tmp.a"]
        assert mask_password(argv, "hunter2") == (
            "mysqldiff --server1=root:***@localhost:3306 shop.a:tmp.a"
        )

    def test_mask_without_password(self) -> None:
        assert mask_password(["mysqldump", "shop"], None) == "mysqldump shop"

    @pytest.mark.asyncio
    async def test_run_command_captures_output(self) -> None:
        result = await run_command(
            [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"]
        )
        assert result.returncode == 3
        assert result.stdout.strip() == "out"
        assert result.stderr.strip() == "err"

    @pytest.mark.asyncio
    async def test_run_command_missing_executable(self, tmp_path) -> None:
        with pytest.raises(OSError):
            await run_command([str(tmp_path / "no-such-tool")])
