"""Pytest configuration for backend tests.

Replaces the shell runner with a recorder so adapters can be tested without
the publishing tools installed.
"""

from __future__ import annotations

import pytest

from fstxn.backends import shell


class FakeShell:
    """Records commands and answers with scripted results."""

    def __init__(self) -> None:
        self.commands: list[list[str]] = []
        self.results: list[tuple[int, list[str], list[str]]] = []

    def queue(self, returncode: int = 0, stdout=(), stderr=()) -> None:
        self.results.append((returncode, list(stdout), list(stderr)))

    def __call__(self, args, ctx, **kwargs) -> shell.CommandResult:
        ctx.check()
        argv = list(args)
        self.commands.append(argv)
        returncode, stdout, stderr = self.results.pop(0) if self.results else (0, [], [])
        return shell.CommandResult(
            args=argv,
            returncode=returncode,
            stdout_lines=stdout,
            stderr_lines=stderr,
        )


@pytest.fixture
def fake_shell(monkeypatch) -> FakeShell:
    recorder = FakeShell()
    monkeypatch.setattr(shell, "run", recorder)
    return recorder
