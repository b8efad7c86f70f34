"""Python SDK client for object graph mapping.

This module wires configuration, the remote store, and the mapping engine
behind one entry point.
"""

from __future__ import annotations

from typing import TypeVar

from core.config import TagMapConfig
from core.types import RemoteId, RemoteNamespace, TagResolution
from mapping.bulk_query import BulkQuery, MappedSequence
from mapping.graph_reader import GraphReader
from mapping.graph_writer import GraphWriter
from mapping.schema_resolver import SchemaResolver
from remote.http_store import HttpRemoteStore
from remote.store_protocol import RemoteStore

T = TypeVar("T")


class TagMapClient:
    """Primary SDK entry point for mapping workflows."""

    def __init__(
        self,
        config: TagMapConfig | None = None,
        store: RemoteStore | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration, read from env when omitted.
            store: Optional store facade; an HTTP store is built when omitted.

        Raises:
            TagMapConfigError: If no username is configured.
        """
        self._config = config or TagMapConfig.from_env()
        owner = self._config.require_username()
        self._http_store = HttpRemoteStore(self._config) if store is None else None
        self._store: RemoteStore = store if store is not None else self._http_store
        self._resolver = SchemaResolver.from_config(self._store, self._config)
        self._writer = GraphWriter(self._store, self._resolver)
        self._reader = GraphReader(self._store, owner)
        self._bulk_query = BulkQuery(self._store, self._reader, owner)

    @property
    def config(self) -> TagMapConfig:
        """Return the runtime configuration."""
        return self._config

    @property
    def store(self) -> RemoteStore:
        """Return the remote store facade."""
        return self._store

    def write(self, instance: object, namespace: str) -> RemoteId:
        """Write a mapped instance graph.

        Args:
            instance: Instance of a mapped type.
            namespace: Owner-relative namespace for field tags.

        Returns:
            Root remote object identifier.
        """
        return self._writer.write(instance, namespace)

    def read(self, identifier: RemoteId | str, namespace: str, target_type: type[T]) -> T:
        """Read one mapped instance (flat, no linked-object reconstruction).

        Args:
            identifier: Remote object identifier.
            namespace: Owner-relative namespace of the field tags.
            target_type: Mapped type to build.

        Returns:
            Populated instance.
        """
        return self._reader.read(identifier, namespace, target_type)

    def read_into(self, instance: T, identifier: RemoteId | str, namespace: str) -> T:
        """Refresh an existing mapped instance from a remote object.

        Args:
            instance: Instance of a mapped type; its mapped fields are overwritten.
            identifier: Remote object identifier.
            namespace: Owner-relative namespace of the field tags.

        Returns:
            The same instance, bound to ``identifier``.
        """
        return self._reader.read_into(instance, identifier, namespace)

    def find_all(self, namespace: str, target_type: type[T]) -> MappedSequence[T]:
        """Find every stored instance of a mapped type.

        Args:
            namespace: Owner-relative namespace of the field tags.
            target_type: Mapped type to build.

        Returns:
            Lazy, restartable sequence of instances.
        """
        return self._bulk_query.find_all(namespace, target_type)

    def resolve_namespace(self, name: str, description: str | None = None) -> RemoteNamespace:
        """Resolve or create an owner-relative namespace."""
        return self._resolver.resolve_namespace(name, description)

    def resolve_tag(
        self,
        namespace: str,
        name: str,
        description: str | None = None,
    ) -> TagResolution:
        """Resolve or create a tag inside an owner-relative namespace."""
        resolved_namespace = self._resolver.resolve_namespace(namespace)
        return self._resolver.resolve_tag(resolved_namespace, name, description)

    def with_store(self, store: RemoteStore) -> "TagMapClient":
        """Clone the client against a different store facade."""
        return TagMapClient(self._config, store)

    def close(self) -> None:
        """Close the HTTP store this client created, if any."""
        if self._http_store is not None:
            self._http_store.close()

    def __enter__(self) -> "TagMapClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
