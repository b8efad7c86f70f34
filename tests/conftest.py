"""Pytest fixtures shared across unit tests.

The ``src`` directory is put on the import path by ``pythonpath`` in
pyproject.toml, so fixtures import project modules directly.
"""

from __future__ import annotations

import pytest

from core.config import TagMapConfig
from core.constants import DEFAULT_TYPE_TAG_NAME, MAIN_STORE_URL
from mapping.mapper_client import TagMapClient
from remote.memory_store import InMemoryRemoteStore

TEST_OWNER = "alice"


@pytest.fixture
def config() -> TagMapConfig:
    """Config for the test owner against the default store URL."""
    return TagMapConfig(
        base_url=MAIN_STORE_URL,
        username=TEST_OWNER,
        password="secret",
        timeout_seconds=5.0,
        type_tag_namespace=None,
        type_tag_name=DEFAULT_TYPE_TAG_NAME,
    )


@pytest.fixture
def store() -> InMemoryRemoteStore:
    """In-memory store with the test owner's root namespace."""
    return InMemoryRemoteStore(usernames=(TEST_OWNER,))


@pytest.fixture
def client(config: TagMapConfig, store: InMemoryRemoteStore) -> TagMapClient:
    """SDK client bound to the in-memory store."""
    return TagMapClient(config, store)
