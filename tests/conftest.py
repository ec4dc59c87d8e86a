"""Shared test fixtures."""

from __future__ import annotations

import pytest

import sample_workers  # noqa: F401  registers the shared workers at import time
from cloudtasker import registry
from cloudtasker.config import configure, reset_config
from cloudtasker.testing import FakeDispatcher


@pytest.fixture(autouse=True)
def isolated_runtime(monkeypatch):
    """Give every test its own config and a registry copy it may mutate."""
    monkeypatch.setattr(registry, "_WORKERS", dict(registry._WORKERS))
    monkeypatch.setattr(registry, "_NAMES", dict(registry._NAMES))
    monkeypatch.setattr(
        registry,
        "_OPTIONS",
        {worker_cls: dict(options) for worker_cls, options in registry._OPTIONS.items()},
    )
    monkeypatch.delenv("CLOUDTASKER_MAX_RETRIES", raising=False)
    monkeypatch.delenv("CLOUDTASKER_WORKER_MODULES", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture()
def fake_dispatcher() -> FakeDispatcher:
    dispatcher = FakeDispatcher()
    configure(dispatcher=dispatcher)
    return dispatcher
