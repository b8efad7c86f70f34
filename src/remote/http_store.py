"""HTTP implementation of the remote store facade.

This module maps store primitives onto the FluidDB REST API using httpx.
Transport errors and unexpected statuses are logged and reported as
``None``/``False`` so the mapping engine sees one failure convention.
"""

from __future__ import annotations

import json
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from core.config import TagMapConfig
from core.constants import JSON_CONTENT_TYPE, PRIMITIVE_VALUE_CONTENT_TYPE, USER_AGENT
from core.logging_config import get_logger
from core.types import RemoteId, RemoteNamespace, RemoteObject, RemoteTag

_LOGGER = get_logger(__name__)
_OK = (200,)
_CREATED = (201,)
_UPDATED = (200, 204)


class HttpRemoteStore:
    """Remote store backed by the tag store HTTP API."""

    def __init__(
        self,
        config: TagMapConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Create the store and its HTTP client.

        Args:
            config: Runtime configuration with URL, credentials, timeout.
            transport: Optional httpx transport, used to stub the network.
        """
        auth = None
        if config.username and config.password:
            auth = httpx.BasicAuth(config.username, config.password)
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            auth=auth,
            headers={"User-Agent": USER_AGENT, "Accept": JSON_CONTENT_TYPE},
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "HttpRemoteStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_namespace(
        self,
        path: str,
        want_description: bool = False,
        want_namespaces: bool = False,
        want_tags: bool = False,
    ) -> RemoteNamespace | None:
        """Fetch a namespace by fully-qualified path, ``None`` when absent."""
        payload = self._get_json(
            f"namespaces/{_quote_path(path)}",
            params={
                "returnDescription": _flag(want_description),
                "returnNamespaces": _flag(want_namespaces),
                "returnTags": _flag(want_tags),
            },
        )
        if payload is None:
            return None
        return RemoteNamespace(
            path=path,
            namespace_id=_optional_id(payload.get("id")),
            description=payload.get("description"),
            namespace_names=tuple(payload.get("namespaceNames", ())),
            tag_names=tuple(payload.get("tagNames", ())),
        )

    def create_namespace(
        self,
        parent_path: str,
        name: str,
        description: str,
    ) -> RemoteNamespace | None:
        """Create ``name`` under ``parent_path``."""
        payload = self._send_json(
            "POST",
            f"namespaces/{_quote_path(parent_path)}",
            {"name": name, "description": description},
            expected=_CREATED,
        )
        if payload is None:
            return None
        path = f"{parent_path}/{name}"
        _LOGGER.info("namespace_created", path=path)
        return RemoteNamespace(
            path=path,
            namespace_id=_optional_id(payload.get("id")),
            description=description,
        )

    def get_tag(
        self,
        namespace_path: str,
        name: str,
        want_description: bool = False,
    ) -> RemoteTag | None:
        """Fetch a tag by namespace and local name, ``None`` when absent."""
        path = f"{namespace_path}/{name}"
        payload = self._get_json(
            f"tags/{_quote_path(path)}",
            params={"returnDescription": _flag(want_description)},
        )
        if payload is None:
            return None
        return RemoteTag(
            path=path,
            tag_id=_optional_id(payload.get("id")),
            description=payload.get("description"),
            indexed=bool(payload.get("indexed", False)),
        )

    def create_tag(
        self,
        namespace_path: str,
        name: str,
        description: str,
        indexed: bool = False,
    ) -> RemoteTag | None:
        """Create tag ``name`` inside ``namespace_path``."""
        payload = self._send_json(
            "POST",
            f"tags/{_quote_path(namespace_path)}",
            {"name": name, "description": description, "indexed": indexed},
            expected=_CREATED,
        )
        if payload is None:
            return None
        return RemoteTag(
            path=f"{namespace_path}/{name}",
            tag_id=_optional_id(payload.get("id")),
            description=description,
            indexed=indexed,
        )

    def fetch_tag_metadata(self, tag: RemoteTag) -> RemoteTag | None:
        """Return ``tag`` refreshed with id, description, and indexed flag."""
        return self.get_tag(tag.namespace_path, tag.name, want_description=True)

    def get_tag_value(
        self,
        object_id: RemoteId,
        tag_path: str,
        content_type: str | None = None,
    ) -> str | None:
        """Read one tag value from an object as text.

        Primitive values are decoded from their JSON encoding; values stored
        with a custom content type are returned as the response text. Without
        ``content_type`` any stored representation is accepted.
        """
        response = self._request(
            "GET",
            f"objects/{quote(str(object_id))}/{_quote_path(tag_path)}",
            headers={"Accept": content_type or "*/*"},
            expected=_OK,
        )
        if response is None:
            return None
        received_type = response.headers.get("Content-Type", "")
        if not received_type.startswith(PRIMITIVE_VALUE_CONTENT_TYPE):
            return response.text
        try:
            value = response.json()
        except ValueError as error:
            _log_failure("GET", tag_path, reason=f"invalid primitive value: {error}")
            return None
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    def create_object(self, about: str | None = None) -> RemoteObject | None:
        """Create an empty object, optionally with about text."""
        body: dict[str, object] = {"about": about} if about is not None else {}
        payload = self._send_json("POST", "objects", body, expected=_CREATED)
        if payload is None or "id" not in payload:
            return None
        return RemoteObject(object_id=RemoteId(str(payload["id"])), about=about)

    def fetch_object(
        self,
        object_id: RemoteId,
        include_about: bool = False,
    ) -> RemoteObject | None:
        """Fetch the tag paths present on an object; values are not fetched."""
        payload = self._get_json(
            f"objects/{quote(str(object_id))}",
            params={"showAbout": _flag(include_about)},
        )
        if payload is None:
            return None
        return RemoteObject(
            object_id=object_id,
            about=payload.get("about"),
            tag_paths=tuple(payload.get("tagPaths", ())),
        )

    def add_tag(self, object_id: RemoteId, tag_path: str, value: str) -> bool:
        """Tag an object with a primitive text value."""
        response = self._request(
            "PUT",
            f"objects/{quote(str(object_id))}/{_quote_path(tag_path)}",
            content=json.dumps(value).encode("utf-8"),
            headers={"Content-Type": PRIMITIVE_VALUE_CONTENT_TYPE},
            expected=_UPDATED,
        )
        return response is not None

    def add_tag_content(
        self,
        object_id: RemoteId,
        tag_path: str,
        content_type: str,
        payload: bytes,
    ) -> bool:
        """Tag an object with an opaque payload sent under ``content_type``."""
        response = self._request(
            "PUT",
            f"objects/{quote(str(object_id))}/{_quote_path(tag_path)}",
            content=payload,
            headers={"Content-Type": content_type},
            expected=_UPDATED,
        )
        return response is not None

    def find_matching(self, query: str) -> tuple[RemoteId, ...] | None:
        """Run a store query and return matching object ids."""
        payload = self._get_json("objects", params={"query": query})
        if payload is None:
            return None
        return tuple(RemoteId(str(item)) for item in payload.get("ids", ()))

    def _get_json(self, path: str, params: Mapping[str, str]) -> dict[str, Any] | None:
        response = self._request("GET", path, params=params, expected=_OK, missing_ok=True)
        return _json_payload(response, "GET", path)

    def _send_json(
        self,
        method: str,
        path: str,
        body: Mapping[str, object],
        expected: tuple[int, ...],
    ) -> dict[str, Any] | None:
        response = self._request(
            method,
            path,
            content=json.dumps(body).encode("utf-8"),
            headers={"Content-Type": JSON_CONTENT_TYPE},
            expected=expected,
        )
        return _json_payload(response, method, path)

    def _request(
        self,
        method: str,
        path: str,
        expected: tuple[int, ...],
        params: Mapping[str, str] | None = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        missing_ok: bool = False,
    ) -> httpx.Response | None:
        """Issue one request, returning ``None`` on any failure.

        Args:
            method: HTTP method.
            path: Path relative to the base URL.
            expected: Status codes treated as success.
            params: Optional query parameters.
            content: Optional raw request body.
            headers: Optional extra headers.
            missing_ok: Treat 404 as a silent miss instead of a failure.

        Returns:
            The response on success, otherwise ``None``.
        """
        try:
            response = self._client.request(
                method,
                path,
                params=params,
                content=content,
                headers=headers,
            )
        except httpx.HTTPError as error:
            _log_failure(method, path, reason=str(error))
            return None
        if response.status_code in expected:
            return response
        if missing_ok and response.status_code == 404:
            _LOGGER.debug("remote_entity_missing", method=method, path=path)
            return None
        _log_failure(method, path, status_code=response.status_code, reason=response.text)
        return None


def _json_payload(
    response: httpx.Response | None,
    method: str,
    path: str,
) -> dict[str, Any] | None:
    if response is None:
        return None
    if not response.content:
        return {}
    try:
        payload = response.json()
    except ValueError as error:
        _log_failure(method, path, reason=f"invalid JSON response: {error}")
        return None
    if not isinstance(payload, dict):
        _log_failure(method, path, reason="expected JSON object response")
        return None
    return payload


def _log_failure(method: str, path: str, **fields: object) -> None:
    _LOGGER.warning("remote_call_failed", method=method, path=path, **fields)


def _quote_path(path: str) -> str:
    return quote(path.strip("/"), safe="/")


def _flag(value: bool) -> str:
    return "True" if value else "False"


def _optional_id(value: object) -> RemoteId | None:
    return RemoteId(str(value)) if value else None
