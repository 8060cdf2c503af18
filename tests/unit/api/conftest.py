"""Fixtures for API unit tests: in-memory queue and store behind dependency overrides, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from usersync.main import app


@pytest.fixture
def app_with_overrides(admission_queue, uow_factory):
    """App with the admission queue and unit of work overridden for testing."""
    from usersync.api import dependencies

    app.dependency_overrides[dependencies.get_admission_queue] = lambda: admission_queue
    app.dependency_overrides[dependencies.get_uow_factory] = lambda: uow_factory
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app. Lifespan is not run."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
