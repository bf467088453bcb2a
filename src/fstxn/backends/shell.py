"""Context-aware subprocess execution for backend adapters."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from fstxn.context import Context
from fstxn.utils.logging import get_logger, timed_operation

logger = get_logger(__name__)

# How often a running command is checked against its context
POLL_INTERVAL_SECONDS = 0.1


class CommandError(Exception):
    """Raised when a command exits non-zero or cannot be launched."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: int,
        stderr_lines: list[str] | None = None,
    ) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr_lines = stderr_lines or []
        message = f"command {' '.join(self.command)!r} exited with status {returncode}"
        if self.stderr_lines:
            message += f": {self.stderr_lines[-1]}"
        super().__init__(message)


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    args: list[str]
    returncode: int
    stdout_lines: list[str] = field(default_factory=list)
    stderr_lines: list[str] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> CommandResult:
        """Raise CommandError unless the command succeeded."""
        if not self.ok:
            raise CommandError(self.args, self.returncode, self.stderr_lines)
        return self


def run(
    args: Sequence[str],
    ctx: Context,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> CommandResult:
    """Run a command to completion unless the context finishes first.

    Args:
        args: Program and arguments.
        ctx: Cancellation context. The process is killed when it finishes.
        cwd: Working directory.
        env: Environment for the process (inherits ours when None).

    Returns:
        CommandResult. A non-zero exit is not raised; call ``check()``.

    Raises:
        ContextError: If the context was cancelled or its deadline passed.
        CommandError: If the program could not be launched.
    """
    ctx.check()
    argv = [str(arg) for arg in args]

    with timed_operation("shell.command", logger=logger, command=argv) as timer:
        try:
            proc = subprocess.Popen(
                argv,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise CommandError(argv, 127, [str(exc)]) from exc

        with proc:
            try:
                while True:
                    try:
                        stdout, stderr = proc.communicate(timeout=POLL_INTERVAL_SECONDS)
                        break
                    except subprocess.TimeoutExpired:
                        err = ctx.err()
                        if err is not None:
                            logger.warning("shell.command_killed", command=argv, reason=str(err))
                            raise err.renew()
            except BaseException:
                # Leaving the block closes the pipes and reaps the child
                proc.kill()
                raise

    return CommandResult(
        args=argv,
        returncode=proc.returncode,
        stdout_lines=stdout.splitlines(),
        stderr_lines=stderr.splitlines(),
        duration_ms=timer.elapsed_ms,
    )
