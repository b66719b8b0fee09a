"""OpenAPI / Swagger document loading and structural helpers.

Reads OpenAPI 3.x and Swagger 2.0 documents (YAML or JSON) and answers the
structural questions the analyzer asks: base URL, effective parameters and
the preferred request body content type.
"""

import json
import logging
import re
from pathlib import Path

import yaml

from .refs import deref

logger = logging.getLogger(__name__)

BODY_CONTENT_PRIORITY = (
    "application/json",
    "*/*",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
)


class SpecLoadError(ValueError):
    """The document could not be read or parsed."""


def detect_format(file_path: Path) -> str:
    """Return 'yaml' for .yaml/.yml files and 'json' for everything else."""
    return "yaml" if file_path.suffix.lower() in (".yaml", ".yml") else "json"


def load_spec(file_path: Path) -> dict:
    """Read and parse an OpenAPI document into a plain dict."""
    file_path = Path(file_path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecLoadError(f"Cannot read '{file_path}': {e}") from e

    try:
        if detect_format(file_path) == "yaml":
            doc = yaml.safe_load(text)
        else:
            doc = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise SpecLoadError(f"Cannot parse '{file_path}': {e}") from e

    if not isinstance(doc, dict):
        raise SpecLoadError(f"'{file_path}' does not contain an OpenAPI object")
    return doc


def server_url(spec: dict) -> str:
    """The raw URL of the first server (OpenAPI 3) or host/basePath (Swagger 2)."""
    servers = spec.get("servers") or []
    if servers and isinstance(servers[0], dict):
        return servers[0].get("url") or "/"
    if spec.get("host"):
        schemes = spec.get("schemes") or ["https"]
        return f"{schemes[0]}://{spec['host']}{spec.get('basePath', '')}"
    return spec.get("basePath") or "/"


def base_url(raw_url: str, fallback_var: str) -> str:
    """Collection-level base URL.

    Only the first ``{variable}`` segment is stripped. Non-absolute URLs
    become ``fallback_var``.
    """
    url = re.sub(r"\{[^}]+\}", "", raw_url, count=1)
    if url != "/" and not url.endswith("/"):
        url += "/"
    return url if url.startswith("http") else fallback_var


def operation_parameters(path_item: dict, operation: dict, spec: dict) -> list[dict]:
    """Resolved parameters of an operation, merged with path-level ones.

    Unresolvable ``$ref`` entries are skipped. An operation parameter
    overrides a path-level parameter with the same name and location.
    """
    merged: dict[tuple, dict] = {}
    for source in (path_item.get("parameters") or [], operation.get("parameters") or []):
        for raw in source:
            param = deref(raw, spec)
            if not isinstance(param, dict):
                logger.warning("Could not resolve parameter reference: %s", raw.get("$ref") if isinstance(raw, dict) else raw)
                continue
            merged[(param.get("name"), param.get("in"))] = param
    return list(merged.values())


def pick_body_content(content: dict) -> tuple[str, str] | None:
    """Choose the request body media type.

    Returns ``(declared_type, effective_type)``; ``*/*`` is treated as JSON.
    """
    if not content:
        return None
    for content_type in BODY_CONTENT_PRIORITY:
        if content_type in content:
            effective = "application/json" if content_type == "*/*" else content_type
            return content_type, effective
    first = next(iter(content))
    return first, first
