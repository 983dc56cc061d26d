"""
Pytest configuration and shared fixtures
"""

import logging
from unittest.mock import Mock

import pytest

from biztositok import Client


@pytest.fixture
def client_config():
    """Minimal client configuration"""
    return {
        "api_endpoint": "http://example.com",
        "username": "test",
        "password": "1234567",
    }


@pytest.fixture
def mock_http_client():
    """Mock transport returning a successful reply"""
    http_client = Mock()
    http_client.send.return_value = '{"success": 1, "message": "OK"}'
    return http_client


@pytest.fixture
def client(client_config, mock_http_client):
    """Client wired to the mock transport"""
    return Client(client_config, http_client=mock_http_client)


@pytest.fixture
def error_payload():
    """Decoded reply of a failed call with two field errors"""
    return {
        "success": 0,
        "message": "Validation failed",
        "errors": [
            {"field": "field1", "error_message": "message 1"},
            {"field": "field2", "error_message": "message 2"},
        ],
    }


@pytest.fixture
def test_config_dict():
    """Config file content as a dictionary"""
    return {
        "client": {
            "api_endpoint": "https://api.example.com",
            "username": "config-user",
            "password": "config-pass",
        },
        "transport": {"timeout": 30, "max_redirects": 5, "user_agent": "Test/1.0"},
        "logging": {"level": "DEBUG"},
    }


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Remove handlers added by setup_logging() during a test"""
    yield
    logger = logging.getLogger("biztositok")
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
