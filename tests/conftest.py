# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from reloft.api.http import app
from reloft.domain.assumptions import DEFAULT_ASSUMPTIONS


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def assumptions():
    return DEFAULT_ASSUMPTIONS
