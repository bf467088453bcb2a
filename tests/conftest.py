"""Pytest configuration and shared fixtures.

Test Categories:
| Category | Focus                         | Tools                |
| Unit     | Context, core, config, errors | pytest, fakes        |
| Backend  | Adapters and shell runner     | pytest, monkeypatch  |
"""

from __future__ import annotations

import os
from collections.abc import Iterable

import pytest

from fstxn.context import Context
from fstxn.transaction.capabilities import Aborter, Starter, Stopper


# =============================================================================
# FAKES
# =============================================================================


class RecordingContext(Context):
    """Context whose waits return at once and are recorded."""

    def __init__(self, parent: Context | None = None) -> None:
        super().__init__(parent)
        self.waits: list[float] = []
        self.interrupted = 0

    def wait(self, seconds: float) -> bool:
        self.waits.append(seconds)
        if self.err() is not None:
            self.interrupted += 1
            return False
        return True


class FakeBackend(Starter, Stopper, Aborter):
    """Scripted backend counting every call.

    ``start_errors``/``stop_errors`` are consumed one per call (None means
    success); once exhausted, ``start_error``/``stop_error`` is raised on
    every further call, or the call succeeds if that is None too.
    """

    name = "fake"

    def __init__(
        self,
        *,
        open_attempts: int = 3,
        publish_attempts: int = 3,
        publish_wait: float = 0.0,
        start_errors: Iterable[Exception | None] = (),
        start_error: Exception | None = None,
        stop_errors: Iterable[Exception | None] = (),
        stop_error: Exception | None = None,
        kill_error: Exception | None = None,
    ) -> None:
        self.attempts_open = open_attempts
        self.attempts_publish = publish_attempts
        self.publish_wait = publish_wait
        self.start_errors = list(start_errors)
        self.start_error = start_error
        self.stop_errors = list(stop_errors)
        self.stop_error = stop_error
        self.kill_error = kill_error
        self.start_calls = 0
        self.stop_calls = 0
        self.kill_calls = 0

    @staticmethod
    def _outcome(scripted: list[Exception | None], fallback: Exception | None) -> None:
        err = scripted.pop(0) if scripted else fallback
        if err is not None:
            raise err

    def start(self, ctx: Context) -> None:
        self.start_calls += 1
        self._outcome(self.start_errors, self.start_error)

    def open_attempts(self) -> int:
        return self.attempts_open

    def stop(self, ctx: Context) -> None:
        self.stop_calls += 1
        self._outcome(self.stop_errors, self.stop_error)

    def publish_attempts(self) -> int:
        return self.attempts_publish

    def publish_attempts_wait(self) -> float:
        return self.publish_wait

    def kill(self, ctx: Context) -> None:
        self.kill_calls += 1
        if self.kill_error is not None:
            raise self.kill_error


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def ctx() -> RecordingContext:
    return RecordingContext()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_backend():
    """Factory for scripted fake backends."""
    return FakeBackend


@pytest.fixture
def make_context():
    """Factory for recording contexts, optionally parented."""
    return RecordingContext


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Keep user/project config files and FSTXN_ env vars out of tests."""
    from fstxn.config import settings as settings_module

    for key in list(os.environ):
        if key.startswith("FSTXN_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(
        settings_module,
        "config_service",
        settings_module.ConfigService(
            project_dir=tmp_path, user_config_path=tmp_path / "user.yaml"
        ),
    )
    monkeypatch.setattr(settings_module, "_cached_settings", None)
