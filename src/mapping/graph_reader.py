"""Flat read-back of mapped instances.

This module rebuilds one instance from the tags on one remote object.
Reads do not recurse: a field written as a linked object comes back as
the child's identifier text.
"""

from __future__ import annotations

from typing import TypeVar

from core.errors import (
    AmbiguousMatchError,
    NotMappableError,
    ObjectFetchError,
    TagMapStateError,
    TagNotFoundError,
)
from core.logging_config import get_logger
from core.types import RemoteId, RemoteTag
from mapping.schema_resolver import qualified_tag_path
from mapping.type_registry import TypeDescriptor, assign_remote_id, describe_type, remote_id_of
from remote.store_protocol import RemoteStore

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class GraphReader:
    """Read mapped instances from remote objects."""

    def __init__(self, store: RemoteStore, owner: str) -> None:
        self._store = store
        self._owner = owner

    def read(self, identifier: RemoteId | str, namespace: str, target_type: type[T]) -> T:
        """Build a ``target_type`` instance from the object at ``identifier``.

        Args:
            identifier: Remote object identifier.
            namespace: Owner-relative namespace the fields were written under.
            target_type: Mapped type to instantiate.

        Returns:
            New instance with every mapped field set to its stored text.

        Raises:
            NotMappableError: If ``target_type`` is not mapped or its factory fails.
            ObjectFetchError: If the object's tag list cannot be fetched.
            TagNotFoundError: If a mapped field has no tag or no value.
            AmbiguousMatchError: If a field's tag path is listed more than once.
        """
        descriptor = describe_type(target_type)
        try:
            instance = descriptor.factory()
        except TypeError as error:
            raise NotMappableError(
                f"Could not build a default {target_type.__name__} instance: {error}"
            ) from error
        return self._populate(instance, descriptor, _as_remote_id(identifier), namespace)

    def read_into(self, instance: T, identifier: RemoteId | str, namespace: str) -> T:
        """Overwrite the mapped fields of an existing ``instance``.

        Raises:
            NotMappableError: If the instance's type is not mapped.
            TagMapStateError: If ``instance`` is bound to another remote object.
            ObjectFetchError: If the object's tag list cannot be fetched.
            TagNotFoundError: If a mapped field has no tag or no value.
            AmbiguousMatchError: If a field's tag path is listed more than once.
        """
        descriptor = describe_type(type(instance))
        object_id = _as_remote_id(identifier)
        current = remote_id_of(instance)
        if current is not None and current != object_id:
            raise TagMapStateError(
                f"{type(instance).__name__} instance is bound to remote object {current}; "
                f"refusing to read object {object_id} into it."
            )
        return self._populate(instance, descriptor, object_id, namespace)

    def _populate(
        self,
        instance: T,
        descriptor: TypeDescriptor,
        object_id: RemoteId,
        namespace: str,
    ) -> T:
        remote_object = self._store.fetch_object(object_id, include_about=True)
        if remote_object is None:
            raise ObjectFetchError(f"Could not fetch tags of remote object {object_id}.")
        for field in descriptor.fields:
            tag_path = qualified_tag_path(self._owner, namespace, field.name)
            tag = self._fetch_tag(_match_tag_path(remote_object.tag_paths, tag_path, object_id))
            value = self._store.get_tag_value(object_id, tag.path)
            if value is None:
                raise TagNotFoundError(f"No value for tag '{tag.path}' on object {object_id}.")
            field.setter(instance, value)
        assign_remote_id(instance, object_id)
        _LOGGER.info(
            "object_read",
            type_name=descriptor.mapped_type.__name__,
            object_id=str(object_id),
            field_count=len(descriptor.fields),
        )
        return instance

    def _fetch_tag(self, tag_path: str) -> RemoteTag:
        namespace_path, _, name = tag_path.rpartition("/")
        tag = self._store.fetch_tag_metadata(RemoteTag(path=tag_path))
        if tag is None:
            raise TagNotFoundError(f"Tag '{name}' not found in namespace '{namespace_path}'.")
        return tag


def _match_tag_path(tag_paths: tuple[str, ...], tag_path: str, object_id: RemoteId) -> str:
    """Return the single listed path equal to ``tag_path``.

    Raises:
        TagNotFoundError: If no listed path matches.
        AmbiguousMatchError: If several listed paths match.
    """
    matches = [path for path in tag_paths if path == tag_path]
    if not matches:
        raise TagNotFoundError(f"Object {object_id} has no tag '{tag_path}'.")
    if len(matches) > 1:
        raise AmbiguousMatchError(
            f"Object {object_id} lists tag '{tag_path}' {len(matches)} times."
        )
    return matches[0]


def _as_remote_id(identifier: RemoteId | str) -> RemoteId:
    return identifier if isinstance(identifier, RemoteId) else RemoteId(identifier)
