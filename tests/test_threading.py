"""Tests for worker and BLAS thread management."""

import os

import pytest

from panassoc.core.threading import blas_threads, get_worker_count

pytestmark = pytest.mark.tier0


class TestGetWorkerCount:
    """Tests for get_worker_count()."""

    def test_returns_positive(self, monkeypatch):
        monkeypatch.delenv("PANASSOC_THREADS", raising=False)
        assert get_worker_count() > 0

    def test_explicit_request_wins(self, monkeypatch):
        monkeypatch.setenv("PANASSOC_THREADS", "3")
        assert get_worker_count(1) == 1

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PANASSOC_THREADS", "1")
        assert get_worker_count() == 1

    def test_env_capped_at_cpu_count(self, monkeypatch):
        monkeypatch.setenv("PANASSOC_THREADS", "9999")
        max_threads = os.cpu_count() or 64
        assert get_worker_count() == max_threads

    def test_env_floored_at_one(self, monkeypatch):
        monkeypatch.setenv("PANASSOC_THREADS", "0")
        assert get_worker_count() == 1

    def test_env_negative_floored(self, monkeypatch):
        monkeypatch.setenv("PANASSOC_THREADS", "-5")
        assert get_worker_count() == 1

    def test_invalid_env_falls_back(self, monkeypatch):
        monkeypatch.setenv("PANASSOC_THREADS", "many")
        assert get_worker_count() >= 1

    def test_request_floored_at_one(self):
        assert get_worker_count(0) == 1


class TestBlasThreads:
    """Tests for blas_threads() context manager."""

    def test_context_manager_with_explicit_count(self):
        with blas_threads(2):
            pass  # enters and exits without error

    def test_context_manager_default(self):
        with blas_threads():
            pass

    def test_context_manager_returns_none(self):
        with blas_threads(2) as result:
            assert result is None
