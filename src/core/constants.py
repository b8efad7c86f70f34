"""Core constants used across TagMap modules.

This module centralizes store URLs, content types, and default descriptions.
Keeping values here avoids magic literals in mapping logic.
"""

from __future__ import annotations

MAIN_STORE_URL = "https://fluiddb.fluidinfo.com/"
SANDBOX_STORE_URL = "http://sandbox.fluidinfo.com/"
DEFAULT_TIMEOUT_SECONDS = 30.0
USER_AGENT = "TagMap Python Client"
PRIMITIVE_VALUE_CONTENT_TYPE = "application/vnd.fluiddb.value+json"
JSON_CONTENT_TYPE = "application/json"
DEFAULT_NAMESPACE_DESCRIPTION = "default namespace description"
DEFAULT_TAG_DESCRIPTION = "default tag description"
DEFAULT_TYPE_TAG_NAMESPACE_NAME = "tagmap"
DEFAULT_TYPE_TAG_NAME = "python-type"
TYPE_TAG_DESCRIPTION = "Python type name of values written under the tagged tag"
PATH_SEPARATOR = "/"
