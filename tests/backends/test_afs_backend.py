"""Tests for the AFS transaction backend."""

from __future__ import annotations

import pytest

from fstxn.backends.afs import AfsBackend, AfsOptions, new_transaction
from fstxn.context import Cancelled, background, with_cancel


class TestAfsBackend:
    @pytest.mark.backend
    def test_lifecycle_runs_no_commands(self, fake_shell):
        txn = new_transaction(AfsOptions())
        ctx = background()

        txn.open(ctx)
        txn.abort(ctx)
        txn.close(ctx)

        assert fake_shell.commands == []
        assert not txn.ongoing

    @pytest.mark.backend
    def test_attempts_from_options(self):
        backend = AfsBackend(AfsOptions(max_transaction_open_attempts=4, publish_attempts_wait=1.5))

        assert backend.open_attempts() == 4
        assert backend.publish_attempts() == 3
        assert backend.publish_attempts_wait() == 1.5

    @pytest.mark.backend
    @pytest.mark.parametrize("method", ["start", "stop", "kill"])
    def test_honours_cancellation(self, method):
        ctx = with_cancel(background())
        ctx.cancel()

        with pytest.raises(Cancelled):
            getattr(AfsBackend(AfsOptions()), method)(ctx)
