"""Bulk retrieval of every stored instance of a mapped type.

This module synthesizes a "has every mapped tag" query and maps matching
object identifiers through the graph reader lazily.
"""

from __future__ import annotations

from typing import Generic, Iterator, Sequence, TypeVar

from core.errors import NotMappableError, QueryError
from core.logging_config import get_logger
from core.types import RemoteId
from mapping.graph_reader import GraphReader
from mapping.schema_resolver import qualified_tag_path
from mapping.type_registry import describe_type
from remote.store_protocol import RemoteStore

_LOGGER = get_logger(__name__)

T = TypeVar("T")


def build_has_all_query(tag_paths: Sequence[str]) -> str:
    """Return a query matching objects that carry every tag in ``tag_paths``.

    Raises:
        ValueError: If ``tag_paths`` is empty.
    """
    if not tag_paths:
        raise ValueError("At least one tag path is required to build a 'has' query.")
    return " and ".join(f"has {path}" for path in tag_paths)


class MappedSequence(Generic[T]):
    """Lazy, restartable sequence of instances read from matched objects.

    Each iteration reads every object again, so it reflects the store's
    current tag values.
    """

    def __init__(
        self,
        ids: tuple[RemoteId, ...],
        namespace: str,
        target_type: type[T],
        reader: GraphReader,
    ) -> None:
        self._ids = ids
        self._namespace = namespace
        self._target_type = target_type
        self._reader = reader

    @property
    def ids(self) -> tuple[RemoteId, ...]:
        """Return matched object identifiers in store order."""
        return self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[T]:
        for object_id in self._ids:
            yield self._reader.read(object_id, self._namespace, self._target_type)


class BulkQuery:
    """Find every remote object that carries all tags of a mapped type."""

    def __init__(self, store: RemoteStore, reader: GraphReader, owner: str) -> None:
        self._store = store
        self._reader = reader
        self._owner = owner

    def find_all(self, namespace: str, target_type: type[T]) -> MappedSequence[T]:
        """Query the store for instances of ``target_type`` under ``namespace``.

        The query runs immediately; instances are read during iteration.

        Raises:
            NotMappableError: If the type is unmapped or has no mapped fields.
            QueryError: If the store rejects the query.
        """
        descriptor = describe_type(target_type)
        if not descriptor.fields:
            raise NotMappableError(
                f"Type {target_type.__name__} has no mapped fields; "
                "an empty 'has' query would match every object."
            )
        query = build_has_all_query(
            [qualified_tag_path(self._owner, namespace, field.name) for field in descriptor.fields]
        )
        ids = self._store.find_matching(query)
        if ids is None:
            raise QueryError(f"Store rejected query '{query}'.")
        _LOGGER.info(
            "query_executed",
            type_name=target_type.__name__,
            query=query,
            match_count=len(ids),
        )
        return MappedSequence(ids, namespace, target_type, self._reader)
