"""TagMap exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each mapping stage raises a specific error type so callers can tell
schema problems from data problems.
"""

from __future__ import annotations


class TagMapError(Exception):
    """Base exception for all TagMap failures."""


class TagMapConfigError(TagMapError):
    """Raised for invalid runtime configuration."""


class TagMapStateError(TagMapError):
    """Raised when an in-memory instance is in an inconsistent mapping state."""


class NotMappableError(TagMapError):
    """Raised when a type carries no mapping metadata."""


class SchemaCreationError(TagMapError):
    """Raised when a namespace or tag cannot be resolved or created."""


class ObjectCreationError(TagMapError):
    """Raised when the store refuses to create a remote object."""


class ObjectFetchError(TagMapError):
    """Raised when a remote object's tag list cannot be fetched."""


class NullFieldValueError(TagMapError):
    """Raised when a mapped field holds no value at write time."""


class TagWriteError(TagMapError):
    """Raised when tagging a remote object fails."""


class TagNotFoundError(TagMapError):
    """Raised when an expected tag is absent during read."""


class AmbiguousMatchError(TagMapError):
    """Raised when more than one tag path matches a mapped field."""


class QueryError(TagMapError):
    """Raised when the store rejects a query."""
