"""Unit tests for recursive graph writes."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from core.config import TagMapConfig
from core.errors import (
    NotMappableError,
    NullFieldValueError,
    ObjectCreationError,
    TagMapStateError,
    TagWriteError,
)
from core.types import RemoteId, RemoteObject
from mapping.graph_writer import GraphWriter
from mapping.schema_resolver import SchemaResolver
from mapping.type_registry import (
    assign_remote_id,
    content_value,
    mapped_type,
    remote_id_of,
    tag_field,
)
from remote.memory_store import InMemoryRemoteStore, StoredValue


@content_value("text/html")
@dataclass
class Html:
    markup: str

    def __str__(self) -> str:
        return self.markup


@mapped_type
@dataclass
class City:
    name: str = tag_field("City name", default="")


@mapped_type
@dataclass
class Person:
    name: str = tag_field("Full name", default="")
    age: int = tag_field(default=0)
    email: str = tag_field(default="")


@mapped_type
@dataclass
class Resident:
    name: str = tag_field(default="")
    city: City | None = tag_field(default=None)
    bio: Html | None = tag_field(default=None)


@mapped_type
@dataclass(eq=False)
class Node:
    label: str = tag_field(default="")
    peer: "Node | None" = tag_field(default=None)


class _FailingTagStore(InMemoryRemoteStore):
    """Store that refuses to tag objects with one tag path."""

    def __init__(self, failing_path: str) -> None:
        super().__init__(usernames=("alice",))
        self._failing_path = failing_path

    def add_tag(self, object_id: RemoteId, tag_path: str, value: str) -> bool:
        if tag_path == self._failing_path:
            return False
        return super().add_tag(object_id, tag_path, value)


class _NoObjectStore(InMemoryRemoteStore):
    def create_object(self, about: str | None = None) -> RemoteObject | None:
        return None


def _writer(store: InMemoryRemoteStore, config: TagMapConfig) -> GraphWriter:
    return GraphWriter(store, SchemaResolver.from_config(store, config))


def test_write_tags_primitives_as_text(store: InMemoryRemoteStore, config: TagMapConfig) -> None:
    """Primitive fields should be written as their text representation."""
    person = Person(name="Ada", age=36, email="ada@example.com")

    object_id = _writer(store, config).write(person, "people")

    assert (
        store.stored_value(object_id, "alice/people/name") == StoredValue(None, "Ada")
        and store.stored_value(object_id, "alice/people/age") == StoredValue(None, "36")
        and remote_id_of(person) == object_id
    )


def test_write_twice_reuses_remote_object(store: InMemoryRemoteStore, config: TagMapConfig) -> None:
    """A second write of the same instance should update, not create."""
    writer = _writer(store, config)
    person = Person(name="Ada", age=36, email="ada@example.com")
    first_id = writer.write(person, "people")
    object_count = store.object_count

    person.age = 37
    second_id = writer.write(person, "people")

    assert (
        first_id == second_id
        and store.object_count == object_count
        and store.stored_value(second_id, "alice/people/age") == StoredValue(None, "37")
    )


def test_write_creates_each_tag_once(store: InMemoryRemoteStore, config: TagMapConfig) -> None:
    """Tags should be created lazily and reused by later writes."""
    writer = _writer(store, config)
    writer.write(Person(name="Ada", age=36, email="a"), "people")
    first_tag = store.get_tag("alice/people", "name")

    writer.write(Person(name="Grace", age=45, email="g"), "people")
    namespace = store.get_namespace("alice/people", want_tags=True)

    assert (
        namespace is not None
        and namespace.tag_names == ("age", "email", "name")
        and store.get_tag("alice/people", "name") == first_tag
    )


def test_new_tag_records_value_type(store: InMemoryRemoteStore, config: TagMapConfig) -> None:
    """Creating a tag should attach the type name to the tag's own object."""
    _writer(store, config).write(Person(name="Ada", age=36, email="a"), "people")
    age_tag = store.get_tag("alice/people", "age", want_description=True)

    assert (
        age_tag is not None
        and age_tag.tag_id is not None
        and age_tag.description == "default tag description"
        and store.stored_value(age_tag.tag_id, "alice/tagmap/python-type") == StoredValue(None, "int")
    )


def test_linked_object_is_written_first_and_linked_by_id(
    store: InMemoryRemoteStore,
    config: TagMapConfig,
) -> None:
    """A mapped field value should become its own object, linked by identifier."""
    resident = Resident(name="Ada", city=City(name="London"), bio=Html("<b>hi</b>"))

    object_id = _writer(store, config).write(resident, "people")
    city_id = remote_id_of(resident.city)

    assert (
        city_id is not None
        and city_id != object_id
        and store.stored_value(object_id, "alice/people/city") == StoredValue(None, str(city_id))
        and store.stored_value(city_id, "alice/people/name") == StoredValue(None, "London")
    )


def test_content_typed_value_keeps_content_type(
    store: InMemoryRemoteStore,
    config: TagMapConfig,
) -> None:
    """Values marked with a content type should be sent raw with that type."""
    resident = Resident(name="Ada", city=City(name="London"), bio=Html("<b>hi</b>"))

    object_id = _writer(store, config).write(resident, "people")

    assert store.stored_value(object_id, "alice/people/bio") == StoredValue(
        "text/html",
        b"<b>hi</b>",
    )


def test_cyclic_graph_write_terminates(store: InMemoryRemoteStore, config: TagMapConfig) -> None:
    """Cycles should link back to the ancestor instead of recursing forever."""
    first = Node(label="a")
    second = Node(label="b", peer=first)
    first.peer = second

    first_id = _writer(store, config).write(first, "graph")
    second_id = remote_id_of(second)

    assert (
        second_id is not None
        and store.stored_value(first_id, "alice/graph/peer") == StoredValue(None, str(second_id))
        and store.stored_value(second_id, "alice/graph/peer") == StoredValue(None, str(first_id))
    )


def test_write_rejects_unmapped_type(store: InMemoryRemoteStore, config: TagMapConfig) -> None:
    """Unmapped instances should fail before any schema is created."""
    with pytest.raises(NotMappableError):
        _writer(store, config).write(object(), "people")

    assert store.get_namespace("alice/people") is None


def test_partial_failure_keeps_earlier_tags(config: TagMapConfig) -> None:
    """A failing field should abort the write and leave earlier tags in place."""
    failing_store = _FailingTagStore("alice/people/age")
    person = Person(name="Ada", age=36, email="ada@example.com")

    with pytest.raises(TagWriteError):
        _writer(failing_store, config).write(person, "people")

    object_id = remote_id_of(person)
    assert (
        object_id is not None
        and failing_store.stored_value(object_id, "alice/people/name") is not None
        and failing_store.stored_value(object_id, "alice/people/email") is None
        and failing_store.get_tag("alice/people", "email") is None
    )


def test_none_field_value_is_rejected(store: InMemoryRemoteStore, config: TagMapConfig) -> None:
    """A None field should fail after earlier fields were written."""
    resident = Resident(name="Ada")

    with pytest.raises(NullFieldValueError):
        _writer(store, config).write(resident, "people")

    object_id = remote_id_of(resident)
    assert object_id is not None and store.stored_value(object_id, "alice/people/name") is not None


def test_object_creation_failure_raises(config: TagMapConfig) -> None:
    """A refused object creation should surface as a domain error."""
    with pytest.raises(ObjectCreationError):
        _writer(_NoObjectStore(usernames=("alice",)), config).write(Person(), "people")


def test_preassigned_identifier_is_reused(store: InMemoryRemoteStore, config: TagMapConfig) -> None:
    """An instance bound to an existing object should tag that object."""
    existing = store.create_object()
    assert existing is not None
    person = Person(name="Ada", age=36, email="a")
    assign_remote_id(person, existing.object_id)

    object_id = _writer(store, config).write(person, "people")

    assert object_id == existing.object_id


def test_rebinding_identifier_is_refused() -> None:
    """An assigned identifier is immutable."""
    person = Person()
    assign_remote_id(person, RemoteId("one"))

    with pytest.raises(TagMapStateError):
        assign_remote_id(person, RemoteId("two"))
