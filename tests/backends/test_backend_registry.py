"""Tests for building backends and transactions by name."""

from __future__ import annotations

from pathlib import Path

import pytest

from fstxn.backends.afs import AfsBackend
from fstxn.backends.cvmfs import CvmfsBackend
from fstxn.backends.registry import available_backends, create_backend, create_transaction
from fstxn.config.settings import Settings
from fstxn.transaction.core import Transaction


@pytest.fixture
def settings() -> Settings:
    return Settings.from_dict(
        {
            "transaction": {"open_attempts": 5, "publish_attempts": 2, "publish_attempts_wait": 4},
            "backends": {
                "default_backend": "afs",
                "cvmfs": {"nightly_repo": "configured.example.org", "max_publish_attempts": 6},
            },
        }
    )


class TestRegistry:
    @pytest.mark.backend
    def test_available_backends(self):
        assert available_backends() == ["afs", "cvmfs"]

    @pytest.mark.backend
    def test_default_backend_from_settings(self, settings):
        assert isinstance(create_backend(settings=settings), AfsBackend)

    @pytest.mark.backend
    def test_transaction_defaults_fill_options(self, settings):
        backend = create_backend("afs", settings=settings)

        assert backend.open_attempts() == 5
        assert backend.publish_attempts() == 2
        assert backend.publish_attempts_wait() == 4

    @pytest.mark.backend
    def test_configured_section_overrides_defaults(self, settings):
        backend = create_backend("cvmfs", settings=settings)

        assert isinstance(backend, CvmfsBackend)
        assert backend.repo == "configured.example.org"
        assert backend.publish_attempts() == 6
        assert backend.open_attempts() == 5

    @pytest.mark.backend
    def test_explicit_options_win(self, settings):
        backend = create_backend("cvmfs", {"nightly_repo": "explicit.example.org"}, settings=settings)

        assert backend.repo == "explicit.example.org"

    @pytest.mark.backend
    def test_catalog_dirs_are_passed_through(self, settings, tmp_path):
        backend = create_backend("cvmfs", None, tmp_path / "a", str(tmp_path / "b"), settings=settings)

        assert backend.catalog_dirs == [tmp_path / "a", Path(tmp_path / "b")]

    @pytest.mark.backend
    def test_unknown_backend(self, settings):
        with pytest.raises(KeyError, match="Unknown backend 'eos'"):
            create_backend("eos", settings=settings)

    @pytest.mark.backend
    def test_global_settings_used_by_default(self):
        backend = create_backend("cvmfs")

        assert backend.open_attempts() == 3

    @pytest.mark.backend
    def test_create_transaction(self, settings):
        txn = create_transaction("afs", settings=settings)

        assert isinstance(txn, Transaction)
        assert txn.starter is txn.stopper is txn.aborter
        assert not txn.ongoing
