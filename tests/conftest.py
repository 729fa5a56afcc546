"""Test configuration and fixtures."""
import pytest
from fastapi.testclient import TestClient

from app import create_app
from registry import RoomRegistry
from relay import RelayEngine


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def relay(registry):
    return RelayEngine(registry)


@pytest.fixture
def app(registry):
    return create_app(registry)


@pytest.fixture
def client(app):
    """Client sharing one event loop across all HTTP and websocket sessions."""
    with TestClient(app) as test_client:
        yield test_client
