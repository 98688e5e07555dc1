"""Running external command-line tools (mysqldiff, mysqldump).

Commands are run as argument vectors (no shell), one at a time, and awaited
until they exit.  There is no timeout.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of a finished command."""

    returncode: int
    stdout: str
    stderr: str


CommandRunner = Callable[[Sequence[str]], Awaitable[CommandResult]]


async def run_command(argv: Sequence[str]) -> CommandResult:
    """Run ``argv`` and capture its output.

    Raises:
        OSError: If the executable can't be started (e.g., not installed).
    """
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    return CommandResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def mask_password(argv: Sequence[str], password: str | None) -> str:
    """Render a command line for logs with the password replaced by ``***``."""
    rendered = " ".join(argv)
    if password:
        rendered = rendered.replace(password, "***")
    return rendered
