"""Pytest fixtures for API tests.

Provides a test client wired to the in-memory test database and a
stubbed advisor client.
"""

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from src.api.main import app
from src.api.routes.chat import get_advisor_client
from src.db.connection import get_db
from src.services.advisor_client import AdvisorClient


@pytest.fixture
def advisor() -> AsyncMock:
    """Advisor stub; tests set complete.return_value or side_effect."""
    mock = AsyncMock(spec=AdvisorClient)
    mock.complete.return_value = "TITLE: Getting started\n\nWrite a one-page plan."
    return mock


@pytest.fixture
def client(test_db: Session, advisor: AsyncMock) -> Generator[TestClient, None, None]:
    """Create a TestClient with overridden database and advisor dependencies.

    Args:
        test_db: Test database session fixture.
        advisor: Advisor stub fixture.

    Yields:
        TestClient configured for testing.
    """

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_advisor_client] = lambda: advisor
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
