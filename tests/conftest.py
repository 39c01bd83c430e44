"""
Pytest configuration for the Gatehouse test suite.

This configuration sets up:
- Project root on sys.path
- Test markers for categorization
- Settings isolated per test (tmp log directory, cheap bcrypt cost)
- Fake clocks for time-dependent components
- Application and TestClient fixtures
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: Tests for individual components
    - integration: Requests through the full application
    - slow: Tests that take a long time to run
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: End-to-end tests through the full application")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# =============================================================================
# Fake Clocks
# =============================================================================


class FakeMillisClock:
    """Epoch-millisecond clock advanced by hand."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class FakeUtcClock:
    """UTC datetime clock advanced by hand."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def ms_clock() -> FakeMillisClock:
    return FakeMillisClock()


@pytest.fixture
def utc_clock() -> FakeUtcClock:
    return FakeUtcClock()


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings(tmp_path):
    """
    Settings with safe test defaults.

    - Log files under a per-test tmp directory
    - Minimum bcrypt cost so seeding the directory is fast
    - No slow-route delay and no background sweeper

    Returns:
        Settings: Configured settings for testing
    """
    from gatehouse.core.config import Settings

    return Settings(
        service_name="gatehouse-test",
        environment="development",
        log_dir=str(tmp_path / "logs"),
        log_colors=False,
        password_hash_rounds=4,
        slow_route_delay_seconds=0,
        sweep_interval_seconds=0,
        rate_limit_window_ms=60_000,
        rate_limit_max_requests=100,
        session_ttl_seconds=3600,
    )


@pytest.fixture
def directory():
    """Seeded users hashed at the minimum bcrypt cost."""
    from gatehouse.auth.directory import UserDirectory

    return UserDirectory.with_defaults(rounds=4)


# =============================================================================
# Application
# =============================================================================


@pytest.fixture
def app(test_settings):
    """Fresh application with its own GatehouseState."""
    from gatehouse.main import create_app

    return create_app(test_settings)


@pytest.fixture
def client(app) -> TestClient:
    """TestClient for the application (lifespan not started)."""
    return TestClient(app)


@pytest.fixture
def login(client):
    """
    Log in through the API.

    Returns:
        Callable (username, password) -> token
    """

    def _login(username: str = "admin", password: str = "admin123") -> str:
        response = client.post(
            "/api/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return response.json()["data"]["token"]

    return _login
