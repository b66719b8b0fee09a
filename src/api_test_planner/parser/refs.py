"""JSON-Reference ($ref) resolution inside a loaded OpenAPI document."""

import logging
from typing import Any
from urllib.parse import unquote

logger = logging.getLogger(__name__)


def resolve_ref(ref: str, spec: dict) -> Any | None:
    """Resolve a local ``#/...`` pointer against ``spec``.

    Segments are JSON-Pointer decoded (``~1`` -> ``/``, ``~0`` -> ``~``) and
    percent-decoded. Returns None when the pointer is not local, when an
    intermediate value is not a mapping or when a key is missing.
    """
    if not isinstance(ref, str) or not ref.startswith("#/"):
        logger.warning("Unsupported schema reference: %r", ref)
        return None

    current: Any = spec
    for segment in ref[2:].split("/"):
        key = unquote(segment.replace("~1", "/").replace("~0", "~"))
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            logger.warning("Could not resolve schema reference: %s (segment: %s)", ref, key)
            return None
    return current


def deref(node: Any, spec: dict) -> Any | None:
    """Follow ``node['$ref']`` when present, otherwise return ``node`` unchanged."""
    if isinstance(node, dict) and "$ref" in node:
        return resolve_ref(node["$ref"], spec)
    return node
