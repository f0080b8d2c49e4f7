import pytest
from datetime import datetime
from httpx import AsyncClient, ASGITransport

import app.core.redis as redis_module
from app.main import app
from app.core.enums import DistanceSource
from app.schemas.distance import DistanceEstimate
from app.services.distance import DistanceEstimator, get_estimator


class FakeRedis:
    """In-memory stand-in for the async Redis client used by the quote store"""

    def __init__(self):
        self.data = {}
        self.expiry = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def ping(self):
        return True

    async def aclose(self):
        pass


@pytest.fixture
def weekday_morning():
    # Wednesday, no holiday, outside evening hours
    return datetime(2024, 6, 12, 10, 0)


@pytest.fixture
def estimator():
    return DistanceEstimator(routing=None)


@pytest.fixture
def make_distance():
    def _make(miles, minutes=60, exact=True, source=DistanceSource.EXACT_TABLE):
        return DistanceEstimate(
            distance_miles=miles,
            estimated_minutes=minutes,
            exact=exact,
            source=source,
        )
    return _make


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_module, "redis", fake)
    return fake


@pytest.fixture
def no_redis(monkeypatch):
    monkeypatch.setattr(redis_module, "redis", None)


@pytest.fixture
async def test_client():
    app.dependency_overrides[get_estimator] = lambda: DistanceEstimator(routing=None)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def valid_quote_data():
    return {
        "pickup_address": "10 Downing Street, London SW1A 2AA",
        "delivery_address": "1 Victoria Square, Birmingham B1 1BD",
        "van_size": "medium",
        "move_date": "2024-06-12T10:00:00",
        "helpers": 1,
        "pickup_floor": "firstFloor",
        "delivery_floor": "ground",
        "urgency": "standard",
    }


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "distance: marks tests related to distance estimation"
    )
    config.addinivalue_line(
        "markers", "routing: marks tests related to the external routing client"
    )
