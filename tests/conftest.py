"""
Shared fixtures.
"""
import pytest

import config
from config import Config


@pytest.fixture(autouse=True)
def reset_config():
    """Drop the cached global config around every test."""
    config._config = None
    yield
    config._config = None


@pytest.fixture
def deployment_config():
    return Config(function_name='echo', log_retention_days=7, stage_name='v1')
