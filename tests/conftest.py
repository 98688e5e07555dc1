"""Shared fakes and fixtures.

``FakeClient`` implements the ``DatabaseClient`` protocol in memory and
``FakeDiffer`` stands in for ``mysqldiff``, so no test needs a MySQL server
or external tool.
"""

import asyncio
import textwrap
from pathlib import Path

import pytest

from tabsync.config.models import ServerProfile, SyncSettings
from tabsync.schema.models import DiffOutcome


class FakeClient:
    """In-memory ``DatabaseClient`` recording every call.

    Any SQL containing one of ``fail_on`` raises ``RuntimeError``.
    """

    def __init__(self, tables=(), fail_on=()):
        self.tables = list(tables)
        self.fail_on = list(fail_on)
        self.queries: list[str] = []
        self.executed: list[str] = []
        self.scripts: list[str] = []
        self.closed = False

    def _check(self, sql: str) -> None:
        for marker in self.fail_on:
            if marker in sql:
                raise RuntimeError(f"simulated failure on {marker!r}")

    async def fetch_all(self, sql):
        self.queries.append(sql)
        self._check(sql)
        return [(name,) for name in self.tables]

    async def execute(self, sql):
        self._check(sql)
        self.executed.append(sql)

    async def execute_script(self, sql):
        self._check(sql)
        self.scripts.append(sql)

    async def close(self):
        self.closed = True


class FakeDiffer:
    """Structural differ returning canned outputs.

    Args:
        outputs: table -> ALTER text for successful diffs.
        failures: table -> (error, stdout) for failed diffs.
        delays: table -> seconds to sleep before answering.
    """

    def __init__(self, outputs=None, failures=None, delays=None):
        self.outputs = outputs or {}
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def diff(self, table):
        self.calls.append(table)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(table, 0))
        finally:
            self.in_flight -= 1
        if table in self.failures:
            error, output = self.failures[table]
            return DiffOutcome(table=table, ok=False, error=error, output=output, returncode=2)
        return DiffOutcome(table=table, ok=True, output=self.outputs.get(table, ""), returncode=0)


def create_sql(table: str) -> str:
    """A CREATE TABLE statement wrapped the way mysqldump writes it."""
    return textwrap.dedent(f"""\
        /*!40101 SET @saved_cs_client     = @@character_set_client */;
        /*!50503 SET character_set_client = utf8mb4 */;
        CREATE TABLE `{table}` (
          `id` int NOT NULL AUTO_INCREMENT,
          PRIMARY KEY (`id`)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        /*!40101 SET character_set_client = @saved_cs_client */;
        """)


def clean_create_sql(table: str) -> str:
    """``create_sql(table)`` with the conditional comments stripped."""
    return textwrap.dedent(f"""\
        CREATE TABLE `{table}` (
          `id` int NOT NULL AUTO_INCREMENT,
          PRIMARY KEY (`id`)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """)


def write_schema_dir(directory: Path, tables) -> Path:
    """Write one dump-style ``<table>.sql`` per table."""
    directory.mkdir(parents=True, exist_ok=True)
    for table in tables:
        (directory / f"{table}.sql").write_text(create_sql(table), encoding="utf-8")
    return directory


@pytest.fixture
def schema_dir(tmp_path: Path) -> Path:
    return write_schema_dir(tmp_path / "schema", ["users", "orders"])


@pytest.fixture
def settings(tmp_path: Path, schema_dir: Path) -> SyncSettings:
    return SyncSettings(
        server=ServerProfile(host="db.local", port=3306, user="deploy", password="s3cret"),
        live_db="shop",
        schema_dir=schema_dir,
        scratch_db="tmp",
        push_script_path=tmp_path / "out" / "push.sql",
    )
