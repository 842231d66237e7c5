"""Fixtures for API unit tests: in-memory stores behind dependency overrides, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from scan_engine.api import dependencies
from scan_engine.main import app


@pytest.fixture
def app_with_overrides(registry, audit_repository, settings_store):
    """App with DB-backed stores swapped for in-memory fakes; fresh process-wide singletons."""
    dependencies.reset_singletons()
    app.dependency_overrides[dependencies.get_machine_registry] = lambda: registry
    app.dependency_overrides[dependencies.get_audit_repository] = lambda: audit_repository
    app.dependency_overrides[dependencies.get_terminal_settings] = lambda: settings_store
    yield app
    app.dependency_overrides.clear()
    dependencies.reset_singletons()


@pytest.fixture
async def client(app_with_overrides):
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def operator_headers():
    return {"X-Operator-ID": "op-1", "X-Operator-Name": "Nimal"}
