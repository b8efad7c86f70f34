"""Runtime configuration model for TagMap.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os

from core.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TYPE_TAG_NAME,
    DEFAULT_TYPE_TAG_NAMESPACE_NAME,
    MAIN_STORE_URL,
    PATH_SEPARATOR,
)
from core.errors import TagMapConfigError


@dataclass(frozen=True)
class TagMapConfig:
    """Validated runtime configuration.

    Attributes:
        base_url: Root URL of the tag store HTTP API.
        username: Store user owning the mapped namespaces.
        password: Store password sent with every request.
        timeout_seconds: Per-request transport timeout.
        type_tag_namespace: Fully-qualified namespace of the type-descriptor tag.
        type_tag_name: Local name of the type-descriptor tag.
    """

    base_url: str
    username: str | None
    password: str | None
    timeout_seconds: float
    type_tag_namespace: str | None
    type_tag_name: str

    @classmethod
    def from_env(cls) -> "TagMapConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            TagMapConfigError: If environment values are invalid.
        """
        base_url = os.getenv("TAGMAP_BASE_URL", MAIN_STORE_URL)
        username = os.getenv("TAGMAP_USERNAME") or None
        password = os.getenv("TAGMAP_PASSWORD") or None
        timeout_value = os.getenv("TAGMAP_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        type_tag_namespace = os.getenv("TAGMAP_TYPE_TAG_NAMESPACE") or None
        type_tag_name = os.getenv("TAGMAP_TYPE_TAG_NAME", DEFAULT_TYPE_TAG_NAME)
        return cls(
            base_url=_normalize_base_url(base_url),
            username=username,
            password=password,
            timeout_seconds=_parse_timeout(timeout_value),
            type_tag_namespace=type_tag_namespace,
            type_tag_name=_parse_tag_name(type_tag_name),
        )

    def require_username(self) -> str:
        """Return the owning username or fail when unset.

        Raises:
            TagMapConfigError: If no username is configured.
        """
        if not self.username:
            raise TagMapConfigError(
                "TAGMAP_USERNAME is not set. Mapped namespaces are owner-qualified, "
                "so a store username is required."
            )
        return self.username

    def with_base_url(self, base_url: str) -> "TagMapConfig":
        """Return a copy pointed at another store URL.

        Raises:
            TagMapConfigError: If ``base_url`` is not an http(s) URL.
        """
        return replace(self, base_url=_normalize_base_url(base_url))

    def resolved_type_tag_namespace(self) -> str:
        """Return the type-descriptor tag namespace path.

        Defaults to ``{username}/tagmap`` when no explicit path is configured.
        """
        if self.type_tag_namespace:
            return self.type_tag_namespace.strip(PATH_SEPARATOR)
        return f"{self.require_username()}{PATH_SEPARATOR}{DEFAULT_TYPE_TAG_NAMESPACE_NAME}"


def _normalize_base_url(raw_value: str) -> str:
    """Validate the base URL and ensure a trailing slash.

    Raises:
        TagMapConfigError: If the value is not an http(s) URL.
    """
    value = raw_value.strip()
    if not value.startswith(("http://", "https://")):
        raise TagMapConfigError(
            f"Invalid TAGMAP_BASE_URL value: expected http(s) URL, got '{raw_value}'."
        )
    return value if value.endswith("/") else value + "/"


def _parse_timeout(raw_value: str) -> float:
    """Parse the timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive timeout in seconds.

    Raises:
        TagMapConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise TagMapConfigError(
            "Invalid TAGMAP_TIMEOUT_SECONDS value: "
            f"expected number, got '{raw_value}'. "
            "Set TAGMAP_TIMEOUT_SECONDS to a numeric value."
        ) from error
    if timeout <= 0:
        raise TagMapConfigError(
            f"Invalid TAGMAP_TIMEOUT_SECONDS value: expected positive number, got {timeout}."
        )
    return timeout


def _parse_tag_name(raw_value: str) -> str:
    value = raw_value.strip()
    if not value or PATH_SEPARATOR in value:
        raise TagMapConfigError(
            f"Invalid TAGMAP_TYPE_TAG_NAME value '{raw_value}': expected a local tag name."
        )
    return value
