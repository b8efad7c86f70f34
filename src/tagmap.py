"""Public SDK surface for TagMap.

This module provides a stable import path for mapping users.
It re-exports the client, registry decorators, and error types.
"""

from __future__ import annotations

from core.config import TagMapConfig
from core.errors import (
    AmbiguousMatchError,
    NotMappableError,
    NullFieldValueError,
    ObjectCreationError,
    ObjectFetchError,
    QueryError,
    SchemaCreationError,
    TagMapConfigError,
    TagMapError,
    TagNotFoundError,
    TagWriteError,
)
from core.types import RemoteId
from mapping.bulk_query import MappedSequence
from mapping.mapper_client import TagMapClient
from mapping.type_registry import (
    FieldSpec,
    content_value,
    mapped_type,
    register_content_value,
    register_type,
    remote_id_of,
    tag_field,
)
from remote.http_store import HttpRemoteStore
from remote.memory_store import InMemoryRemoteStore

__all__ = [
    "AmbiguousMatchError",
    "FieldSpec",
    "HttpRemoteStore",
    "InMemoryRemoteStore",
    "MappedSequence",
    "NotMappableError",
    "NullFieldValueError",
    "ObjectCreationError",
    "ObjectFetchError",
    "QueryError",
    "RemoteId",
    "SchemaCreationError",
    "TagMapClient",
    "TagMapConfig",
    "TagMapConfigError",
    "TagMapError",
    "TagNotFoundError",
    "TagWriteError",
    "content_value",
    "mapped_type",
    "register_content_value",
    "register_type",
    "remote_id_of",
    "tag_field",
]
