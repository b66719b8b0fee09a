"""Analyzer configuration.

Defaults reproduce the stock behaviour; the CLI overrides a few of them.
"""

from typing import Literal

from pydantic import BaseModel

HTTP_VERBS = ("get", "post", "put", "delete", "patch", "options", "head")

EXCLUDE_PATH_KEYWORDS = ("test", "echo", "prueba", "health", "ping", "swagger", "openapi")


class AnalyzerConfig(BaseModel):
    """Tunables for one analysis run."""

    base_url_var: str = "{{baseUrl}}"
    token_var: str = "{{token}}"
    api_key_var: str = "{{apiKey}}"
    resource_id_var: str = "{{resourceId}}"
    non_existent_id_var: str = "{{nonExistentId}}"
    username_var: str = "{{apiUsername}}"
    password_var: str = "{{apiPassword}}"

    token_value: str = "YOUR_TOKEN_HERE"
    api_key_value: str = "YOUR_API_KEY_HERE"
    resource_id_value: str = "1"
    non_existent_id_value: str = "id-does-not-exist-999"
    username_value: str = "YOUR_USERNAME"
    password_value: str = "YOUR_PASSWORD"

    exclude_path_keywords: tuple[str, ...] = EXCLUDE_PATH_KEYWORDS
    http_verbs: tuple[str, ...] = HTTP_VERBS

    # oneOf/anyOf branch selection: "first" keeps branch 0, "widest" picks
    # the branch declaring the most properties.
    composition_policy: Literal["first", "widest"] = "first"

    # Hours per suggestion type; 0 disables a type.
    estimate_overrides: dict[str, float] = {}

    unique_operation_ids: bool = True


def variable_name(token: str) -> str:
    """Strip the ``{{ }}`` around a collection variable token."""
    return token.strip().removeprefix("{{").removesuffix("}}")
