"""Structural diff of one table via ``mysqldiff``.

For a table present both in the files and live, ``mysqldiff`` compares
``live.<table>`` with ``scratch.<table>`` and prints the ALTER statements
that turn the live table into the file-defined one.

Usage:
    differ = TableDiffer(settings)
    outcome = await differ.diff("orders")
    if outcome.ok:
        print(outcome.output)
"""

import logging

from tabsync.commands import CommandRunner, mask_password, run_command
from tabsync.config.models import SyncSettings
from tabsync.schema.models import DiffOutcome

logger = logging.getLogger(__name__)

# mysqldiff splits --server1 on these
UNSAFE_PASSWORD_CHARS = ("@", ":")


class DiffFailedError(Exception):
    """Raised when a structural diff fails and the policy is ``abort``."""

    def __init__(self, outcome: DiffOutcome) -> None:
        self.outcome = outcome
        super().__init__(f"Structural diff of `{outcome.table}` failed: {outcome.error}")


class TableDiffer:
    """Runs the structural-diff tool for tables of the live and scratch databases.

    Args:
        settings: Run settings (server credentials, database names, tool).
        runner: Coroutine running an argument vector; replaced in tests.
    """

    def __init__(self, settings: SyncSettings, runner: CommandRunner = run_command) -> None:
        self._settings = settings
        self._runner = runner
        password = settings.server.password
        if password and any(ch in password for ch in UNSAFE_PASSWORD_CHARS):
            logger.warning(
                "The server password contains `@` or `:`; %s cannot parse it in --server1 "
                "and structural diffs will fail.",
                settings.tools.diff_command,
            )

    def build_command(self, table: str) -> list[str]:
        """Argument vector comparing ``live.<table>`` to ``scratch.<table>``."""
        server = self._settings.server
        credentials = server.user
        if server.password is not None:
            credentials = f"{server.user}:{server.password}"
        return [
            self._settings.tools.diff_command,
            f"--server1={credentials}@{server.host}:{server.port}",
            "--compact",
            "--difftype=sql",
            "--changes-for=server1",
            f"{self._settings.live_db}.{table}:{self._settings.scratch_db}.{table}",
        ]

    async def diff(self, table: str) -> DiffOutcome:
        """Diff one table and report success-with-output or failure-with-cause."""
        argv = self.build_command(table)
        logger.info(
            "About to find the alter script for `%s.%s - %s.%s`",
            self._settings.scratch_db,
            table,
            self._settings.live_db,
            table,
        )
        logger.debug("Running %s", mask_password(argv, self._settings.server.password))

        try:
            result = await self._runner(argv)
        except OSError as e:
            return DiffOutcome(table=table, ok=False, error=f"cannot run {argv[0]}: {e}")

        stderr = result.stderr.strip()
        if result.returncode not in self._settings.tools.diff_ok_exit_codes:
            return DiffOutcome(
                table=table,
                ok=False,
                output=result.stdout,
                error=stderr or f"exited with status {result.returncode}",
                returncode=result.returncode,
            )
        if stderr:
            return DiffOutcome(
                table=table,
                ok=False,
                output=result.stdout,
                error=stderr,
                returncode=result.returncode,
            )
        return DiffOutcome(
            table=table,
            ok=True,
            output=result.stdout,
            returncode=result.returncode,
        )
