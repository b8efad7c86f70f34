"""Unit tests for lazy schema resolution."""

from __future__ import annotations

import pytest

from core.constants import DEFAULT_NAMESPACE_DESCRIPTION, DEFAULT_TAG_DESCRIPTION
from core.errors import SchemaCreationError
from core.types import RemoteNamespace
from mapping.schema_resolver import SchemaResolver, qualified_tag_path
from remote.memory_store import InMemoryRemoteStore


class _NoNamespaceStore(InMemoryRemoteStore):
    """Store that refuses namespace creation and records tag attempts."""

    def __init__(self) -> None:
        super().__init__(usernames=("alice",))
        self.tag_attempts = 0

    def create_namespace(
        self,
        parent_path: str,
        name: str,
        description: str,
    ) -> RemoteNamespace | None:
        return None

    def create_tag(self, namespace_path: str, name: str, description: str, indexed: bool = False):
        self.tag_attempts += 1
        return super().create_tag(namespace_path, name, description, indexed)


def _resolver(store: InMemoryRemoteStore) -> SchemaResolver:
    return SchemaResolver(
        store=store,
        owner="alice",
        type_tag_namespace="alice/tagmap",
        type_tag_name="python-type",
    )


def test_qualified_tag_path_prefixes_owner() -> None:
    """Tag paths should be owner/namespace/field."""
    assert qualified_tag_path("alice", "/people/", "name") == "alice/people/name"


def test_resolve_namespace_creates_with_default_description(
    store: InMemoryRemoteStore,
) -> None:
    """Missing namespaces should be created with the default description."""
    namespace = _resolver(store).resolve_namespace("people")

    stored = store.get_namespace("alice/people", want_description=True)
    assert (
        namespace.path == "alice/people"
        and stored is not None
        and stored.description == DEFAULT_NAMESPACE_DESCRIPTION
    )


def test_resolve_namespace_is_idempotent(store: InMemoryRemoteStore) -> None:
    """Resolving an existing namespace should return it unchanged."""
    resolver = _resolver(store)
    first = resolver.resolve_namespace("people", "People I know")

    second = resolver.resolve_namespace("people")

    assert first.namespace_id == second.namespace_id and second.description == "People I know"


def test_resolve_namespace_creates_every_missing_level(store: InMemoryRemoteStore) -> None:
    """Nested namespace names should create each level."""
    namespace = _resolver(store).resolve_namespace("org/people")

    assert namespace.path == "alice/org/people" and store.get_namespace("alice/org") is not None


def test_missing_top_level_namespace_is_not_created(store: InMemoryRemoteStore) -> None:
    """User root namespaces belong to the store and are never created."""
    with pytest.raises(SchemaCreationError):
        _resolver(store).resolve_namespace_path("bob/people")


def test_namespace_failure_stops_before_tags() -> None:
    """A failed namespace creation should raise before any tag work."""
    store = _NoNamespaceStore()
    resolver = _resolver(store)

    with pytest.raises(SchemaCreationError):
        resolver.resolve_namespace("people")

    assert store.tag_attempts == 0


def test_resolve_tag_reports_creation_once(store: InMemoryRemoteStore) -> None:
    """Only the first resolution of a tag should report it as created."""
    resolver = _resolver(store)
    namespace = resolver.resolve_namespace("people")

    first = resolver.resolve_tag(namespace, "name")
    second = resolver.resolve_tag(namespace, "name", "ignored")

    stored = store.get_tag("alice/people", "name", want_description=True)
    assert (
        first.created
        and not second.created
        and first.tag.tag_id == second.tag.tag_id
        and stored is not None
        and stored.description == DEFAULT_TAG_DESCRIPTION
    )


def test_resolve_type_descriptor_tag_uses_configured_location(
    store: InMemoryRemoteStore,
) -> None:
    """The type-descriptor tag should live at the configured path."""
    tag = _resolver(store).resolve_type_descriptor_tag()

    assert tag.path == "alice/tagmap/python-type"


def test_resolve_tag_raises_when_creation_fails(store: InMemoryRemoteStore) -> None:
    """A tag that cannot be created should raise."""
    orphan = RemoteNamespace(path="alice/ghost")

    with pytest.raises(SchemaCreationError):
        _resolver(store).resolve_tag(orphan, "name")
