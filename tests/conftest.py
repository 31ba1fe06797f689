# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for forcemap tests.

This module provides common test fixtures, mock objects, and configuration
that can be used across all test modules.
"""

import copy

import pytest
from unittest.mock import MagicMock

from forcemap.core.config import ForceConfig
from forcemap.models.sobject import SObject

from fixtures.describe_response import TEST_CLASS_DESCRIBE


@pytest.fixture
def dummy_auth():
    """Mock authentication object for testing."""

    class DummyAuth:
        def _acquire_token(self, scope):
            class Token:
                access_token = "test_token_12345"

            return Token()

    return DummyAuth()


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return ForceConfig(http_retries=1, http_backoff=0.0, http_timeout=5, http_jitter=False)


@pytest.fixture
def sample_instance_url():
    """Standard test instance URL."""
    return "https://na1.example.com"


@pytest.fixture
def describe():
    """A fresh copy of the TestClass describe response."""
    return copy.deepcopy(TEST_CLASS_DESCRIBE)


@pytest.fixture
def mock_client(describe):
    """Transport double answering describe calls with the TestClass description."""
    client = MagicMock()
    client.describe_sobject.return_value = describe
    return client


@pytest.fixture
def test_class(mock_client):
    """A fresh SObject subclass materialized as TestClass against ``mock_client``."""

    class TestClass(SObject):
        pass

    return TestClass.materialize("TestClass", mock_client)
