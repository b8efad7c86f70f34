"""Lazy namespace and tag resolution.

This module looks namespaces and tags up by exact name and creates them
when absent. Nothing is cached: every call consults the store, so repeated
resolution converges on the same remote entity.
"""

from __future__ import annotations

from core.config import TagMapConfig
from core.constants import (
    DEFAULT_NAMESPACE_DESCRIPTION,
    DEFAULT_TAG_DESCRIPTION,
    PATH_SEPARATOR,
    TYPE_TAG_DESCRIPTION,
)
from core.errors import SchemaCreationError
from core.logging_config import get_logger
from core.types import RemoteNamespace, RemoteTag, TagResolution
from remote.store_protocol import RemoteStore

_LOGGER = get_logger(__name__)


def qualified_namespace_path(owner: str, namespace: str) -> str:
    """Return ``{owner}/{namespace}``.

    Raises:
        SchemaCreationError: If ``namespace`` is empty.
    """
    name = namespace.strip(PATH_SEPARATOR)
    if not name:
        raise SchemaCreationError("Namespace name must not be empty.")
    return f"{owner}{PATH_SEPARATOR}{name}"


def qualified_tag_path(owner: str, namespace: str, field_name: str) -> str:
    """Return the fully-qualified tag name ``{owner}/{namespace}/{field_name}``."""
    return f"{qualified_namespace_path(owner, namespace)}{PATH_SEPARATOR}{field_name}"


class SchemaResolver:
    """Resolve-or-create access to namespaces and tags for one owner."""

    def __init__(
        self,
        store: RemoteStore,
        owner: str,
        type_tag_namespace: str,
        type_tag_name: str,
    ) -> None:
        """Create a resolver.

        Args:
            store: Remote store facade.
            owner: User whose root namespace holds mapped namespaces.
            type_tag_namespace: Fully-qualified namespace of the type-descriptor tag.
            type_tag_name: Local name of the type-descriptor tag.
        """
        self._store = store
        self._owner = owner
        self._type_tag_namespace = type_tag_namespace
        self._type_tag_name = type_tag_name

    @classmethod
    def from_config(cls, store: RemoteStore, config: TagMapConfig) -> "SchemaResolver":
        """Build a resolver from runtime configuration."""
        return cls(
            store=store,
            owner=config.require_username(),
            type_tag_namespace=config.resolved_type_tag_namespace(),
            type_tag_name=config.type_tag_name,
        )

    @property
    def owner(self) -> str:
        """Return the owning username."""
        return self._owner

    def resolve_namespace(
        self,
        name: str,
        description: str | None = None,
    ) -> RemoteNamespace:
        """Resolve an owner-relative namespace, creating missing levels.

        Args:
            name: Namespace name relative to the owner, e.g. ``people``.
            description: Description for a newly created leaf namespace.

        Returns:
            Existing or newly created namespace.

        Raises:
            SchemaCreationError: If any level cannot be created.
        """
        return self.resolve_namespace_path(qualified_namespace_path(self._owner, name), description)

    def resolve_namespace_path(
        self,
        path: str,
        description: str | None = None,
    ) -> RemoteNamespace:
        """Resolve a fully-qualified namespace path, creating missing levels.

        Top-level namespaces belong to store users and are never created.

        Raises:
            SchemaCreationError: If the path cannot be resolved or created.
        """
        existing = self._store.get_namespace(path, want_description=True)
        if existing is not None:
            return existing
        parent_path, _, local_name = path.rpartition(PATH_SEPARATOR)
        if not parent_path:
            raise SchemaCreationError(
                f"Top-level namespace '{path}' does not exist and cannot be created. "
                "Check the configured username."
            )
        self.resolve_namespace_path(parent_path)
        created = self._store.create_namespace(
            parent_path,
            local_name,
            description or DEFAULT_NAMESPACE_DESCRIPTION,
        )
        if created is None:
            raise SchemaCreationError(f"Failed to create namespace '{path}'.")
        _LOGGER.info("namespace_resolved", path=path, created=True)
        return created

    def resolve_tag(
        self,
        namespace: RemoteNamespace,
        name: str,
        description: str | None = None,
    ) -> TagResolution:
        """Resolve a tag inside ``namespace``, creating it when absent.

        Args:
            namespace: Resolved namespace holding the tag.
            name: Local tag name.
            description: Description for a newly created tag.

        Returns:
            Tag descriptor plus whether this call created it.

        Raises:
            SchemaCreationError: If the tag cannot be created.
        """
        existing = self._store.get_tag(namespace.path, name)
        if existing is not None:
            return TagResolution(tag=existing, created=False)
        created = self._store.create_tag(
            namespace.path,
            name,
            description or DEFAULT_TAG_DESCRIPTION,
            indexed=False,
        )
        if created is None:
            raise SchemaCreationError(f"Failed to create tag '{namespace.path}/{name}'.")
        _LOGGER.info("tag_created", path=created.path)
        return TagResolution(tag=created, created=True)

    def resolve_type_descriptor_tag(self) -> RemoteTag:
        """Resolve the well-known tag recording value type names.

        Raises:
            SchemaCreationError: If its namespace or the tag cannot be created.
        """
        namespace = self.resolve_namespace_path(self._type_tag_namespace)
        return self.resolve_tag(namespace, self._type_tag_name, TYPE_TAG_DESCRIPTION).tag
