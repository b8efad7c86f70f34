"""In-process implementation of the remote store facade.

This module keeps namespaces, tags, and objects in dictionaries with the
same create-if-absent and failure conventions as the HTTP store. It backs
offline runs and the engine's unit tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

from core.logging_config import get_logger
from core.types import RemoteId, RemoteNamespace, RemoteObject, RemoteTag

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class StoredValue:
    """One tag value held on an in-memory object.

    Attributes:
        content_type: Custom content type, ``None`` for primitive values.
        value: Text for primitives, raw bytes for custom content.
    """

    content_type: str | None
    value: str | bytes


@dataclass
class _ObjectRecord:
    about: str | None
    values: dict[str, StoredValue] = field(default_factory=dict)


@dataclass
class _NamespaceRecord:
    namespace_id: RemoteId
    description: str


class InMemoryRemoteStore:
    """Dictionary-backed remote store.

    Top-level namespaces are created for each configured user, mirroring
    a store that provisions a root namespace per account.
    """

    def __init__(self, usernames: tuple[str, ...] = ()) -> None:
        self._objects: dict[RemoteId, _ObjectRecord] = {}
        self._namespaces: dict[str, _NamespaceRecord] = {}
        self._tags: dict[str, RemoteTag] = {}
        for username in usernames:
            self._namespaces[username] = _NamespaceRecord(
                namespace_id=self._new_object(None),
                description=f"Root namespace of {username}",
            )

    @property
    def object_count(self) -> int:
        """Return the number of objects, including namespace and tag objects."""
        return len(self._objects)

    def stored_value(self, object_id: RemoteId, tag_path: str) -> StoredValue | None:
        """Return the raw stored value of a tag on an object."""
        record = self._objects.get(object_id)
        if record is None:
            return None
        return record.values.get(tag_path)

    def get_namespace(
        self,
        path: str,
        want_description: bool = False,
        want_namespaces: bool = False,
        want_tags: bool = False,
    ) -> RemoteNamespace | None:
        record = self._namespaces.get(path)
        if record is None:
            return None
        prefix = path + "/"
        child_namespaces = tuple(
            sorted(
                key[len(prefix):]
                for key in self._namespaces
                if key.startswith(prefix) and "/" not in key[len(prefix):]
            )
        )
        child_tags = tuple(
            sorted(tag.name for tag in self._tags.values() if tag.namespace_path == path)
        )
        return RemoteNamespace(
            path=path,
            namespace_id=record.namespace_id,
            description=record.description if want_description else None,
            namespace_names=child_namespaces if want_namespaces else (),
            tag_names=child_tags if want_tags else (),
        )

    def create_namespace(
        self,
        parent_path: str,
        name: str,
        description: str,
    ) -> RemoteNamespace | None:
        path = f"{parent_path}/{name}"
        if parent_path not in self._namespaces or path in self._namespaces or "/" in name:
            _LOGGER.warning("remote_call_failed", method="create_namespace", path=path)
            return None
        record = _NamespaceRecord(namespace_id=self._new_object(None), description=description)
        self._namespaces[path] = record
        _LOGGER.info("namespace_created", path=path)
        return RemoteNamespace(path=path, namespace_id=record.namespace_id, description=description)

    def get_tag(
        self,
        namespace_path: str,
        name: str,
        want_description: bool = False,
    ) -> RemoteTag | None:
        tag = self._tags.get(f"{namespace_path}/{name}")
        if tag is None or want_description:
            return tag
        return RemoteTag(path=tag.path, tag_id=tag.tag_id, indexed=tag.indexed)

    def create_tag(
        self,
        namespace_path: str,
        name: str,
        description: str,
        indexed: bool = False,
    ) -> RemoteTag | None:
        path = f"{namespace_path}/{name}"
        if namespace_path not in self._namespaces or path in self._tags or "/" in name:
            _LOGGER.warning("remote_call_failed", method="create_tag", path=path)
            return None
        tag = RemoteTag(
            path=path,
            tag_id=self._new_object(None),
            description=description,
            indexed=indexed,
        )
        self._tags[path] = tag
        return tag

    def fetch_tag_metadata(self, tag: RemoteTag) -> RemoteTag | None:
        return self._tags.get(tag.path)

    def get_tag_value(
        self,
        object_id: RemoteId,
        tag_path: str,
        content_type: str | None = None,
    ) -> str | None:
        stored = self.stored_value(object_id, tag_path)
        if stored is None:
            return None
        if content_type is not None and stored.content_type != content_type:
            return None
        if isinstance(stored.value, bytes):
            return stored.value.decode("utf-8", errors="replace")
        return stored.value

    def create_object(self, about: str | None = None) -> RemoteObject | None:
        if about is not None:
            for object_id, record in self._objects.items():
                if record.about == about:
                    return RemoteObject(object_id=object_id, about=about)
        return RemoteObject(object_id=self._new_object(about), about=about)

    def fetch_object(
        self,
        object_id: RemoteId,
        include_about: bool = False,
    ) -> RemoteObject | None:
        record = self._objects.get(object_id)
        if record is None:
            return None
        return RemoteObject(
            object_id=object_id,
            about=record.about if include_about else None,
            tag_paths=tuple(record.values),
        )

    def add_tag(self, object_id: RemoteId, tag_path: str, value: str) -> bool:
        return self._put_value(object_id, tag_path, StoredValue(content_type=None, value=value))

    def add_tag_content(
        self,
        object_id: RemoteId,
        tag_path: str,
        content_type: str,
        payload: bytes,
    ) -> bool:
        return self._put_value(
            object_id,
            tag_path,
            StoredValue(content_type=content_type, value=payload),
        )

    def find_matching(self, query: str) -> tuple[RemoteId, ...] | None:
        """Evaluate ``has`` clauses joined by ``and``/``or``.

        ``and`` binds tighter than ``or``. Any other syntax is rejected.
        """
        try:
            alternatives = _parse_has_query(query)
        except ValueError as error:
            _LOGGER.warning("remote_call_failed", method="find_matching", reason=str(error))
            return None
        return tuple(
            object_id
            for object_id, record in self._objects.items()
            if any(all(path in record.values for path in paths) for paths in alternatives)
        )

    def _put_value(self, object_id: RemoteId, tag_path: str, stored: StoredValue) -> bool:
        record = self._objects.get(object_id)
        if record is None or tag_path not in self._tags:
            _LOGGER.warning("remote_call_failed", method="add_tag", path=tag_path)
            return False
        record.values[tag_path] = stored
        return True

    def _new_object(self, about: str | None) -> RemoteId:
        object_id = RemoteId(str(uuid4()))
        self._objects[object_id] = _ObjectRecord(about=about)
        return object_id


def _parse_has_query(query: str) -> list[list[str]]:
    """Parse ``has a and has b or has c`` into OR-of-AND tag path lists."""
    alternatives: list[list[str]] = []
    for alternative in query.split(" or "):
        paths: list[str] = []
        for clause in alternative.split(" and "):
            keyword, _, path = clause.strip().partition(" ")
            path = path.strip()
            if keyword != "has" or not path or " " in path:
                raise ValueError(f"Unsupported query clause '{clause.strip()}' in '{query}'.")
            paths.append(path)
        alternatives.append(paths)
    return alternatives
