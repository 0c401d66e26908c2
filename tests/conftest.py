"""Pytest configuration and shared fixtures."""

import pytest

from sessionpool.sessions.registry import SessionRegistry
from tests.helpers import WorkerRecorder


@pytest.fixture
def workers() -> WorkerRecorder:
    return WorkerRecorder()


@pytest.fixture
def registry(workers) -> SessionRegistry:
    return SessionRegistry(worker_factory=workers)
