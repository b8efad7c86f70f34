"""Explicit registry of mapped types and content-typed values.

This module records, once per type, which fields participate in the
mapping and how to get and set them, so the graph engine never looks
fields up by name at write or read time.

Example::

    @mapped_type
    @dataclass
    class Person:
        name: str = tag_field("Full name", default="")
        age: int = tag_field(default=0)
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from typing import Any, Callable, Sequence, TypeVar

from core.errors import NotMappableError, TagMapStateError
from core.types import RemoteId

MAPPED_FIELD_METADATA_KEY = "tagmap_field"
_REMOTE_ID_ATTRIBUTE = "_tagmap_remote_id"

TypeT = TypeVar("TypeT", bound=type)
Getter = Callable[[Any], object]
Setter = Callable[[Any, object], None]
Encoder = Callable[[Any], bytes]


@dataclass(frozen=True)
class FieldDescriptor:
    """One mapped field and its accessors.

    Attributes:
        name: Field name, used as the local tag name.
        description: Tag description used when the tag is first created.
        getter: Reads the field from an instance.
        setter: Writes the field on an instance.
    """

    name: str
    description: str | None
    getter: Getter
    setter: Setter


@dataclass(frozen=True)
class TypeDescriptor:
    """Mapping metadata for one type.

    Attributes:
        mapped_type: The registered class.
        fields: Mapped fields in declaration order.
        factory: Builds a default instance for reads.
    """

    mapped_type: type
    fields: tuple[FieldDescriptor, ...]
    factory: Callable[[], Any]


@dataclass(frozen=True)
class ContentValueDescriptor:
    """Custom content type marker for a value type.

    Attributes:
        content_type: Content type the value is transmitted with.
        encoder: Turns a value into its payload bytes.
    """

    content_type: str
    encoder: Encoder


@dataclass(frozen=True)
class FieldSpec:
    """Explicit field declaration for ``register_type``.

    Missing accessors default to plain attribute access on ``name``.
    """

    name: str
    description: str | None = None
    getter: Getter | None = None
    setter: Setter | None = None


@dataclass(frozen=True)
class _MappedFieldMarker:
    description: str | None


_TYPE_REGISTRY: dict[type, TypeDescriptor] = {}
_CONTENT_REGISTRY: dict[type, ContentValueDescriptor] = {}


def tag_field(
    description: str | None = None,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare a dataclass field as a mapped field.

    Args:
        description: Optional tag description.
        default: Default field value.
        default_factory: Default value factory.

    Returns:
        A ``dataclasses.field`` carrying the mapping marker.
    """
    metadata = {MAPPED_FIELD_METADATA_KEY: _MappedFieldMarker(description)}
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def mapped_type(cls: TypeT) -> TypeT:
    """Register a dataclass whose ``tag_field`` fields are mapped.

    Apply above ``@dataclass``. The class must be constructible without
    arguments so reads can build a default instance.

    Raises:
        NotMappableError: If ``cls`` is not a dataclass or has a field
            without a default.
    """
    if not is_dataclass(cls):
        raise NotMappableError(
            f"@mapped_type requires a dataclass, got {cls.__name__}. "
            "Use register_type() for other classes."
        )
    required = [
        item.name
        for item in fields(cls)
        if item.init and item.default is MISSING and item.default_factory is MISSING
    ]
    if required:
        raise NotMappableError(
            f"@mapped_type requires defaults on every field of {cls.__name__}; "
            f"missing for {required}. Reads build instances without arguments."
        )
    specs = [
        FieldSpec(name=item.name, description=item.metadata[MAPPED_FIELD_METADATA_KEY].description)
        for item in fields(cls)
        if MAPPED_FIELD_METADATA_KEY in item.metadata
    ]
    register_type(cls, specs)
    return cls


def register_type(
    cls: type,
    field_specs: Sequence[FieldSpec | str],
    factory: Callable[[], Any] | None = None,
) -> TypeDescriptor:
    """Register any class as a mapped type.

    Args:
        cls: Class to register.
        field_specs: Mapped fields in order; plain strings name attributes.
        factory: Optional default-instance factory, ``cls`` when omitted.

    Returns:
        The stored type descriptor.

    Raises:
        NotMappableError: If two fields share a name, or instances cannot
            record their remote identifier.
    """
    if not _can_record_remote_id(cls):
        raise NotMappableError(
            f"Instances of {cls.__name__} have no __dict__ and no '{_REMOTE_ID_ATTRIBUTE}' "
            "slot, so their remote identifier cannot be recorded."
        )
    descriptors = tuple(_build_field(_as_spec(spec)) for spec in field_specs)
    names = [descriptor.name for descriptor in descriptors]
    if len(set(names)) != len(names):
        raise NotMappableError(f"Duplicate mapped field names on {cls.__name__}: {names}.")
    descriptor = TypeDescriptor(mapped_type=cls, fields=descriptors, factory=factory or cls)
    _TYPE_REGISTRY[cls] = descriptor
    return descriptor


def describe_type(cls: type) -> TypeDescriptor:
    """Return the mapping descriptor for ``cls``.

    Raises:
        NotMappableError: If ``cls`` was never registered.
    """
    descriptor = _TYPE_REGISTRY.get(cls)
    if descriptor is None:
        raise NotMappableError(
            f"Type {cls.__name__} is not a mapped type. "
            "Decorate it with @mapped_type or call register_type()."
        )
    return descriptor


def is_mapped_type(cls: type) -> bool:
    """Return whether ``cls`` is registered as a mapped type."""
    return cls in _TYPE_REGISTRY


def content_value(content_type: str, encoder: Encoder | None = None) -> Callable[[TypeT], TypeT]:
    """Mark a value type as transmitted with a custom content type.

    Args:
        content_type: Content type sent with the payload.
        encoder: Optional payload encoder.

    Returns:
        Class decorator registering the marker.
    """

    def _decorate(cls: TypeT) -> TypeT:
        register_content_value(cls, content_type, encoder)
        return cls

    return _decorate


def register_content_value(
    cls: type,
    content_type: str,
    encoder: Encoder | None = None,
) -> ContentValueDescriptor:
    """Register a content type marker for a class you cannot decorate."""
    if not content_type or "/" not in content_type:
        raise NotMappableError(
            f"Invalid content type '{content_type}' for {cls.__name__}: expected type/subtype."
        )
    descriptor = ContentValueDescriptor(content_type=content_type, encoder=encoder or _encode_default)
    _CONTENT_REGISTRY[cls] = descriptor
    return descriptor


def content_value_of(cls: type) -> ContentValueDescriptor | None:
    """Return the content type marker for ``cls``, if any."""
    return _CONTENT_REGISTRY.get(cls)


def remote_id_of(instance: object) -> RemoteId | None:
    """Return the remote identifier recorded on ``instance``."""
    return getattr(instance, _REMOTE_ID_ATTRIBUTE, None)


def assign_remote_id(instance: object, remote_id: RemoteId) -> None:
    """Record ``remote_id`` on ``instance``.

    Raises:
        TagMapStateError: If a different identifier is already recorded.
    """
    current = remote_id_of(instance)
    if current is not None and current != remote_id:
        raise TagMapStateError(
            f"{type(instance).__name__} instance is already bound to remote object "
            f"{current}; refusing to rebind it to {remote_id}."
        )
    object.__setattr__(instance, _REMOTE_ID_ATTRIBUTE, remote_id)


def _can_record_remote_id(cls: type) -> bool:
    """Return whether instances of ``cls`` accept the remote id attribute."""
    for klass in cls.__mro__:
        if klass is object:
            continue
        slots = klass.__dict__.get("__slots__")
        if slots is None:
            return True
        if isinstance(slots, str):
            slots = (slots,)
        if "__dict__" in slots or _REMOTE_ID_ATTRIBUTE in slots:
            return True
    return False


def _as_spec(spec: FieldSpec | str) -> FieldSpec:
    return FieldSpec(name=spec) if isinstance(spec, str) else spec


def _build_field(spec: FieldSpec) -> FieldDescriptor:
    name = spec.name
    if not name or "/" in name:
        raise NotMappableError(f"Invalid mapped field name '{name}': expected a local tag name.")

    def _get(instance: Any) -> object:
        return getattr(instance, name)

    def _set(instance: Any, value: object) -> None:
        object.__setattr__(instance, name, value)

    return FieldDescriptor(
        name=name,
        description=spec.description,
        getter=spec.getter or _get,
        setter=spec.setter or _set,
    )


def _encode_default(value: object) -> bytes:
    if hasattr(type(value), "__bytes__"):
        return bytes(value)  # type: ignore[call-overload]
    return str(value).encode("utf-8")
