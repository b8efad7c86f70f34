"""Remote store contract consumed by the mapping engine.

Every failure surfaces as ``None`` or ``False``; implementations catch and
log transport problems themselves so the engine never inspects status codes.
"""

from __future__ import annotations

from typing import Protocol

from core.types import RemoteId, RemoteNamespace, RemoteObject, RemoteTag


class RemoteStore(Protocol):
    """Namespace, tag, and object primitives of a schema-free tag store."""

    def get_namespace(
        self,
        path: str,
        want_description: bool = False,
        want_namespaces: bool = False,
        want_tags: bool = False,
    ) -> RemoteNamespace | None: ...

    def create_namespace(
        self,
        parent_path: str,
        name: str,
        description: str,
    ) -> RemoteNamespace | None: ...

    def get_tag(
        self,
        namespace_path: str,
        name: str,
        want_description: bool = False,
    ) -> RemoteTag | None: ...

    def create_tag(
        self,
        namespace_path: str,
        name: str,
        description: str,
        indexed: bool = False,
    ) -> RemoteTag | None: ...

    def fetch_tag_metadata(self, tag: RemoteTag) -> RemoteTag | None: ...

    def get_tag_value(
        self,
        object_id: RemoteId,
        tag_path: str,
        content_type: str | None = None,
    ) -> str | None: ...

    def create_object(self, about: str | None = None) -> RemoteObject | None: ...

    def fetch_object(
        self,
        object_id: RemoteId,
        include_about: bool = False,
    ) -> RemoteObject | None: ...

    def add_tag(self, object_id: RemoteId, tag_path: str, value: str) -> bool: ...

    def add_tag_content(
        self,
        object_id: RemoteId,
        tag_path: str,
        content_type: str,
        payload: bytes,
    ) -> bool: ...

    def find_matching(self, query: str) -> tuple[RemoteId, ...] | None: ...
