"""Shared typed models.

This module defines immutable models for store-side entities so the
facade, schema resolver, and graph engine exchange explicit values.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RemoteId:
    """Opaque identifier of a store-side object.

    Attributes:
        value: Raw identifier string assigned by the store.
    """

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RemoteNamespace:
    """Store namespace descriptor.

    Attributes:
        path: Fully-qualified path, e.g. ``alice/people``.
        namespace_id: Identifier of the namespace's own object.
        description: Namespace description when requested.
        namespace_names: Child namespace names when requested.
        tag_names: Child tag names when requested.
    """

    path: str
    namespace_id: RemoteId | None = None
    description: str | None = None
    namespace_names: tuple[str, ...] = ()
    tag_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class RemoteTag:
    """Store tag descriptor.

    Attributes:
        path: Fully-qualified tag name ``{owner}/{namespace}/{name}``.
        tag_id: Identifier of the tag's own object.
        description: Tag description when fetched.
        indexed: Whether the store indexes tag values.
    """

    path: str
    tag_id: RemoteId | None = None
    description: str | None = None
    indexed: bool = False

    @property
    def name(self) -> str:
        """Return the tag's local name."""
        return self.path.rsplit("/", 1)[-1]

    @property
    def namespace_path(self) -> str:
        """Return the path of the namespace holding this tag."""
        return self.path.rsplit("/", 1)[0]


@dataclass(frozen=True)
class RemoteObject:
    """Store object descriptor.

    Attributes:
        object_id: Identifier assigned by the store.
        about: Optional about text given at creation.
        tag_paths: Tag paths known to be present; values are never cached.
    """

    object_id: RemoteId
    about: str | None = None
    tag_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class TagResolution:
    """Result of resolving a tag through the schema resolver.

    Attributes:
        tag: Resolved tag descriptor.
        created: Whether this resolution created the tag.
    """

    tag: RemoteTag
    created: bool
