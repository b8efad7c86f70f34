"""Recursive object graph writer.

This module persists an instance and every mapped object reachable from
it. Each child is fully written before the parent is tagged with the
child's identifier. Failures abort the write and leave already-written
objects and tags in place.
"""

from __future__ import annotations

from core.errors import NullFieldValueError, ObjectCreationError, TagWriteError
from core.logging_config import get_logger
from core.types import RemoteId, RemoteNamespace, RemoteTag
from mapping.schema_resolver import SchemaResolver
from mapping.type_registry import FieldDescriptor, assign_remote_id, describe_type, remote_id_of
from mapping.value_dispatch import classify_value, encode_content, primitive_text
from remote.store_protocol import RemoteStore

_LOGGER = get_logger(__name__)


class GraphWriter:
    """Write mapped instances as tagged remote objects."""

    def __init__(self, store: RemoteStore, resolver: SchemaResolver) -> None:
        self._store = store
        self._resolver = resolver

    def write(self, instance: object, namespace: str) -> RemoteId:
        """Write ``instance`` and its linked objects under ``namespace``.

        Args:
            instance: Instance of a mapped type.
            namespace: Owner-relative namespace holding the field tags.

        Returns:
            Identifier of the root remote object.

        Raises:
            NotMappableError: If the instance's type is not mapped.
            SchemaCreationError: If a namespace or tag cannot be created.
            ObjectCreationError: If a remote object cannot be created.
            NullFieldValueError: If a mapped field holds ``None``.
            TagWriteError: If tagging a remote object fails.
        """
        describe_type(type(instance))
        resolved_namespace = self._resolver.resolve_namespace(namespace)
        return self._write_instance(instance, resolved_namespace, in_progress=set())

    def _write_instance(
        self,
        instance: object,
        namespace: RemoteNamespace,
        in_progress: set[int],
    ) -> RemoteId:
        descriptor = describe_type(type(instance))
        object_id = self._target_object(instance)
        in_progress.add(id(instance))
        try:
            for field in descriptor.fields:
                self._write_field(instance, object_id, field, namespace, in_progress)
        finally:
            in_progress.discard(id(instance))
        _LOGGER.info(
            "object_written",
            type_name=type(instance).__name__,
            object_id=str(object_id),
            field_count=len(descriptor.fields),
        )
        return object_id

    def _target_object(self, instance: object) -> RemoteId:
        existing = remote_id_of(instance)
        if existing is not None:
            return existing
        created = self._store.create_object(None)
        if created is None:
            raise ObjectCreationError(
                f"Store refused to create an object for {type(instance).__name__}."
            )
        assign_remote_id(instance, created.object_id)
        _LOGGER.info(
            "remote_object_created",
            type_name=type(instance).__name__,
            object_id=str(created.object_id),
        )
        return created.object_id

    def _write_field(
        self,
        instance: object,
        object_id: RemoteId,
        field: FieldDescriptor,
        namespace: RemoteNamespace,
        in_progress: set[int],
    ) -> None:
        value = field.getter(instance)
        if value is None:
            raise NullFieldValueError(
                f"Field '{field.name}' of {type(instance).__name__} is None; "
                "mapped fields must hold a value when written."
            )
        resolution = self._resolver.resolve_tag(namespace, field.name, field.description)
        if resolution.created:
            self._record_value_type(resolution.tag, value)
        tag_path = resolution.tag.path
        kind = classify_value(value)
        if kind == "linked":
            child_id = self._linked_object_id(value, namespace, in_progress)
            written = self._store.add_tag(object_id, tag_path, str(child_id))
        elif kind == "content":
            content_type, payload = encode_content(value)
            written = self._store.add_tag_content(object_id, tag_path, content_type, payload)
        else:
            written = self._store.add_tag(object_id, tag_path, primitive_text(value))
        if not written:
            raise TagWriteError(
                f"Could not tag object {object_id} with '{tag_path}' "
                f"({kind} value of field '{field.name}')."
            )

    def _linked_object_id(
        self,
        value: object,
        namespace: RemoteNamespace,
        in_progress: set[int],
    ) -> RemoteId:
        if id(value) in in_progress:
            # Cycle back to an ancestor: its identifier was assigned on entry.
            ancestor_id = remote_id_of(value)
            if ancestor_id is not None:
                return ancestor_id
        return self._write_instance(value, namespace, in_progress)

    def _record_value_type(self, tag: RemoteTag, value: object) -> None:
        """Attach the type-descriptor tag to a newly created tag's own object."""
        if tag.tag_id is None:
            _LOGGER.warning("tag_object_missing", path=tag.path)
            return
        type_tag = self._resolver.resolve_type_descriptor_tag()
        type_name = type(value).__name__
        if not self._store.add_tag(tag.tag_id, type_tag.path, type_name):
            raise TagWriteError(
                f"Could not record value type '{type_name}' on tag '{tag.path}'."
            )
