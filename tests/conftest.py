"""Pytest configuration and fixtures for treeconf tests."""

import shutil
import tempfile
from pathlib import Path

import pytest

from dataknobs_treeconf import ConfigBuilder


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp)


@pytest.fixture
def fake_env():
    """Environment variables visible to builders created with `builder`."""
    return {}


@pytest.fixture
def builder(fake_env):
    """Builder with the CTX_ prefix reading from `fake_env`."""
    return ConfigBuilder("Ctx_", environ=fake_env.get)


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary."""
    return {
        "name": "myapp",
        "debug": True,
        "database": {
            "host": "localhost",
            "port": 5432,
            "url": "postgresql://${database.host}:${database.port}/${name}",
            "pool": {"size": "10", "timeout": "30s"},
        },
        "cache": {
            "host": "${database.host}",
            "ttl": 3600,
        },
        "servers": ["${database.host}", "backup.example.com"],
    }
