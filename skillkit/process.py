"""Async subprocess execution with a hard timeout."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Sequence

from skillkit.logging import get_logger
from skillkit.models import CommandResult

log = get_logger(__name__)

CommandRunner = Callable[[Sequence[str], float], Awaitable[CommandResult]]


async def run_command_with_timeout(argv: Sequence[str], timeout_seconds: float) -> CommandResult:
    """Run ``argv`` without a shell and capture its output.

    A timed out process is killed and reported with ``code=None``; so is a
    process that could not be spawned, with the OS error in ``stderr``.
    """
    if not argv:
        return CommandResult(code=None, stderr="invalid install command")

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        log.warning("Command could not be started", argv=list(argv), error=str(exc))
        return CommandResult(code=None, stderr=str(exc))

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        log.warning("Command timed out", argv=list(argv), timeout=timeout_seconds)
        return CommandResult(code=None, stderr=f"Command timed out after {timeout_seconds}s")
    except asyncio.CancelledError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        raise

    return CommandResult(
        code=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
