"""Process runner — the single channel for invoking external tools.

Every external program (evaluator, converter, version control) is run to
completion through ``run_command``.  Output is captured whole; there is no
streaming.  A non-zero exit, or a program that cannot be started, raises
``ExecutionFailure`` carrying the program's error text verbatim.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from jrender._errors import ExecutionFailure

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from jrender._types import Args, Runner


async def run_command(
    program: str,
    args: Args = (),
    *,
    input: str | None = None,  # noqa: A002
    cwd: Path | str | None = None,
) -> str:
    """Run *program* with *args* and return its stdout, trailing whitespace stripped.

    Args:
        program: Executable name or path.
        args: Argument vector (without the program itself).
        input: Text delivered on the program's stdin, if any.
        cwd: Working directory for the process.

    Raises:
        ExecutionFailure: The program exited non-zero or could not be spawned.

    """
    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            *args,
            stdin=asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as exc:
        msg = f"{program}: {exc.strerror or exc}"
        raise ExecutionFailure(msg, program=program) from exc

    stdin_bytes = input.encode("utf-8") if input is not None else None
    stdout, stderr = await proc.communicate(stdin_bytes)

    if proc.returncode == 0:
        return stdout.decode("utf-8", errors="replace").rstrip()

    message = stderr.decode("utf-8", errors="replace").strip()
    raise ExecutionFailure(
        message or f"Process exited with code {proc.returncode}",
        program=program,
        returncode=proc.returncode,
    )


async def check_available(program: str, *, runner: Runner = run_command) -> bool:
    """Return True if ``program --version`` runs successfully."""
    try:
        await runner(program, ["--version"])
    except ExecutionFailure:
        return False
    return True


async def missing_tools(
    programs: Iterable[str],
    *,
    runner: Runner = run_command,
) -> list[str]:
    """Probe each program in order and return the names that are unavailable."""
    missing: list[str] = []
    for program in programs:
        if not await check_available(program, runner=runner):
            missing.append(program)
    return missing
