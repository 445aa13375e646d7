# satprep/conftest.py
import random
import sys
from pathlib import Path

import pytest

# Add project root to PYTHONPATH
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(scope="function", autouse=True)
def isolate_singletons(monkeypatch):
    """
    Keep module-level store/service singletons from leaking between tests.

    DATABASE_URL is removed so the default store is always in-memory unless a
    test opts into the SQL store explicitly.
    """
    from satprep.features.daily_challenges.service import reset_daily_challenge_service
    from satprep.features.daily_challenges.store import reset_store

    monkeypatch.delenv("DATABASE_URL", raising=False)
    reset_store()
    reset_daily_challenge_service()
    yield
    reset_store()
    reset_daily_challenge_service()


@pytest.fixture
def fixed_rng():
    """Seeded random source so generated sets are reproducible."""
    return random.Random(1234)


@pytest.fixture
def memory_store():
    from satprep.features.daily_challenges.store import InMemoryChallengeStore

    return InMemoryChallengeStore()


@pytest.fixture
def sql_store():
    """
    SQL store on a private sqlite in-memory database.

    Tables are created before the test and dropped after it.
    """
    from satprep.core.database import init_engine, create_all_tables, drop_all_tables, dispose_engine
    from satprep.features.daily_challenges.store_sql import SqlChallengeStore

    init_engine("sqlite://")
    create_all_tables()
    yield SqlChallengeStore()
    drop_all_tables()
    dispose_engine()


@pytest.fixture
def service(memory_store, fixed_rng):
    from satprep.features.daily_challenges.service import DailyChallengeService

    return DailyChallengeService(store=memory_store, rng=fixed_rng)


@pytest.fixture
def client(service):
    """TestClient bound to the app with a fresh in-memory service."""
    from fastapi.testclient import TestClient

    from satprep.features.daily_challenges.service import reset_daily_challenge_service
    from satprep.main import app

    reset_daily_challenge_service(service)
    with TestClient(app) as test_client:
        yield test_client
