"""
Pytest configuration for the environment monitor.

Provides fixtures for:
- A throwaway SQLite database per test
- The FastAPI app wired to that database
- A dashboard state cache talking to the app in-process
"""

from __future__ import annotations

import os

# Must be set before the app (and its settings) are imported
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from envmonitor.dashboard.api_client import EnvironmentApiClient
from envmonitor.dashboard.state import EnvironmentStateCache
from envmonitor.database.engine import build_engine, get_engine
from envmonitor.main import app
from envmonitor.modules.environments.store import EnvironmentStore


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    engine = build_engine(f"sqlite:///{tmp_path / 'environments.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine: Engine) -> EnvironmentStore:
    store = EnvironmentStore(engine)
    store.create_schema()
    return store


@pytest.fixture
def client(engine: Engine, store: EnvironmentStore) -> Generator[TestClient, None, None]:
    """
    Test client bound to the per-test database.

    Not used as a context manager, so the startup hook (schema + demo seed on
    the configured database) never runs.
    """
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def cache(client: TestClient) -> EnvironmentStateCache:
    return EnvironmentStateCache(EnvironmentApiClient(http_client=client))

