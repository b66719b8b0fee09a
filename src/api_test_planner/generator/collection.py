"""Postman Collection v2.1 export of an analysis result."""

import re
import uuid
from collections.abc import Callable

from api_test_planner.models import AnalysisResult, BodyMode, KeyValue, RequestDescriptor, TestSuggestion

POSTMAN_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"

EXPECTED_STATUS = {"POST": 201, "DELETE": 204}


def postman_path(path: str) -> list[str]:
    """``/users/{id}`` -> ``["users", ":id"]``."""
    return [re.sub(r"^\{([^}]+)\}$", r":\1", segment) for segment in path.lstrip("/").split("/")]


def _entry(kv: KeyValue, with_type: bool = True, with_disabled: bool = True) -> dict:
    entry = {"key": kv.key, "value": kv.value}
    if kv.description:
        entry["description"] = kv.description
    if with_type:
        entry["type"] = kv.type
    if with_disabled and kv.disabled:
        entry["disabled"] = True
    return entry


def _test_script(request: RequestDescriptor, suggestions: list[TestSuggestion]) -> list[str]:
    expected = EXPECTED_STATUS.get(request.method, 200)
    lines = [
        "// Basic Happy Path Status Code Check",
        f"let expectedStatusCode = {expected};",
        'pm.test("Status code is " + expectedStatusCode, function () {',
        "    pm.response.to.have.status(expectedStatusCode);",
        "});",
        "",
        "// Suggested checks:",
    ]
    lines.extend(f"// - {s.description}" for s in suggestions)
    return lines


class CollectionAssembler:
    """Turns request descriptors into a nested folder/request tree."""

    def __init__(self, base_url_var: str = "{{baseUrl}}", id_factory: Callable[[], uuid.UUID] | None = None):
        self.base_url_var = base_url_var
        self.id_factory = id_factory or uuid.uuid4

    def build(self, result: AnalysisResult) -> dict:
        by_operation: dict[tuple[str, str], list[TestSuggestion]] = {}
        for s in result.suggestions:
            by_operation.setdefault((s.verb, s.path), []).append(s)

        name = result.title + (f" ({result.source_name})" if result.source_name else "")
        return {
            "info": {
                "_postman_id": str(self.id_factory()),
                "name": name,
                "schema": POSTMAN_SCHEMA,
                "description": result.description,
            },
            "item": [
                {
                    "name": folder.name,
                    "description": folder.description,
                    "item": [
                        self.request_item(r, by_operation.get((r.method, r.path), [])) for r in folder.requests
                    ],
                }
                for folder in result.folders
            ],
            "variable": [_entry(v, with_disabled=False) for v in result.variables],
        }

    def request_item(self, request: RequestDescriptor, suggestions: list[TestSuggestion]) -> dict:
        segments = postman_path(request.path)
        body = self._body(request)
        req = {
            "method": request.method,
            "header": [_entry(h) for h in request.headers],
            "url": {
                "raw": self.base_url_var + "/".join(segments),
                "host": [self.base_url_var],
                "path": segments,
                "query": [_entry(q, with_type=False) for q in request.query],
                "variable": [_entry(v, with_type=False, with_disabled=False) for v in request.path_variables],
            },
            "description": request.description,
        }
        if body is not None:
            req["body"] = body
        if request.auth is not None:
            auth = {"type": request.auth.type}
            if request.auth.entries:
                auth[request.auth.type] = [_entry(e, with_disabled=False) for e in request.auth.entries]
            req["auth"] = auth

        return {
            "name": request.name,
            "_postman_id": str(self.id_factory()),
            "request": req,
            "response": [],
            "event": [
                {
                    "listen": "test",
                    "script": {
                        "id": str(self.id_factory()),
                        "type": "text/javascript",
                        "exec": _test_script(request, suggestions),
                    },
                }
            ],
        }

    def _body(self, request: RequestDescriptor) -> dict | None:
        body = request.body
        if body is None:
            return None
        if body.mode is BodyMode.RAW:
            out = {"mode": "raw", "raw": body.raw or ""}
            if body.language:
                out["options"] = {"raw": {"language": body.language}}
            return out
        fields = []
        for f in body.fields:
            if f.key in body.file_fields:
                fields.append({"key": f.key, "type": "file", "src": [], "description": f.description})
            else:
                fields.append({"key": f.key, "value": f.value, "type": "text", "description": f.description})
        return {"mode": body.mode.value, body.mode.value: fields}


def build_collection(
    result: AnalysisResult,
    base_url_var: str = "{{baseUrl}}",
    id_factory: Callable[[], uuid.UUID] | None = None,
) -> dict:
    return CollectionAssembler(base_url_var, id_factory).build(result)
