"""
Shared fixtures: every async test gets its own SQLite file so concurrent
sessions behave like they would against a real database.
"""

import random

import pytest

from rackt.engine import RacktEngine


@pytest.fixture
async def engine(tmp_path):
    engine = await RacktEngine.connect(f"sqlite:///{tmp_path / 'rackt_test.db'}", max_retries=10)
    yield engine
    await engine.close()


@pytest.fixture
def rng():
    return random.Random(1234)
