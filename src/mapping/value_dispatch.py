"""Value-kind dispatch shared by the graph writer.

Every field value takes exactly one path, checked in this order:
linked mapped object, custom content type, then primitive text.
"""

from __future__ import annotations

from typing import Literal

from mapping.type_registry import content_value_of, is_mapped_type

ValueKind = Literal["linked", "content", "primitive"]


def classify_value(value: object) -> ValueKind:
    """Return the write path for ``value``; first match wins."""
    value_type = type(value)
    if is_mapped_type(value_type):
        return "linked"
    if content_value_of(value_type) is not None:
        return "content"
    return "primitive"


def primitive_text(value: object) -> str:
    """Return the default text representation written for primitives."""
    return value if isinstance(value, str) else str(value)


def encode_content(value: object) -> tuple[str, bytes]:
    """Return ``(content_type, payload)`` for a content-typed value.

    Raises:
        ValueError: If ``value`` has no content type marker.
    """
    descriptor = content_value_of(type(value))
    if descriptor is None:
        raise ValueError(f"{type(value).__name__} has no content type marker.")
    return descriptor.content_type, descriptor.encoder(value)
