"""Request descriptors: auth, parameters and body for one operation."""

import json
import logging
from typing import Any

from api_test_planner.config import AnalyzerConfig
from api_test_planner.models import (
    AuthDescriptor,
    BodyMode,
    KeyValue,
    Param,
    ParamLocation,
    RequestBody,
    RequestDescriptor,
    SecurityDescriptor,
    SecurityType,
)
from api_test_planner.parser.refs import deref
from api_test_planner.parser.swagger import pick_body_content

from .examples import ExampleBuilder

logger = logging.getLogger(__name__)

OAUTH2_NOTE = "\n\n**Note:** OAuth2 detected. Manual configuration required in Postman's Authorization tab."
OPENID_NOTE = "\n\n**Note:** OpenID Connect detected. Manual configuration required in Postman's Authorization tab."


def stringify(value: Any) -> str:
    """Render a generated value as a form/parameter string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


class RequestBuilder:
    """Assembles the :class:`RequestDescriptor` of each operation."""

    def __init__(self, spec: dict, examples: ExampleBuilder, config: AnalyzerConfig | None = None):
        self.spec = spec
        self.examples = examples
        self.config = config or AnalyzerConfig()
        self.uses_basic_auth = False

    def build(
        self,
        operation_id: str,
        verb: str,
        path: str,
        operation: dict,
        parameters: list[dict],
        security: SecurityDescriptor | None,
    ) -> RequestDescriptor:
        request = RequestDescriptor(
            operation_id=operation_id,
            name=str(operation.get("summary") or operation_id),
            method=verb.upper(),
            path=path,
            description=str(operation.get("description") or f"Operation ID: {operation_id}"),
        )
        self._apply_auth(request, security)
        for raw in parameters:
            self._apply_parameter(request, raw, security)
        body_source = self.body_source(operation)
        if body_source is not None:
            content_type, schema = body_source
            request.body = self._build_body(request, operation_id, content_type, schema)
        return request

    # -- auth -----------------------------------------------------------------

    def _apply_auth(self, request: RequestDescriptor, security: SecurityDescriptor | None) -> None:
        cfg = self.config
        if security is None:
            request.auth = AuthDescriptor(type="noauth")
            return

        if security.type is SecurityType.API_KEY:
            location = security.location or "header"
            request.auth = AuthDescriptor(
                type="apikey",
                entries=[
                    KeyValue(key="key", value=security.name or "", type="string"),
                    KeyValue(key="value", value=cfg.api_key_var, type="string"),
                    KeyValue(key="in", value=location, type="string"),
                ],
            )
            entry = KeyValue(key=security.name or "", value=cfg.api_key_var, description=f"API Key ({security.scheme_name})")
            if security.name and location == "header":
                request.headers.append(entry)
            elif security.name and location == "query":
                request.query.append(entry)
        elif security.type is SecurityType.HTTP:
            scheme = (security.scheme or "").lower()
            if scheme == "bearer":
                request.auth = AuthDescriptor(
                    type="bearer",
                    entries=[KeyValue(key="token", value=cfg.token_var, type="string")],
                )
            elif scheme == "basic":
                request.auth = AuthDescriptor(
                    type="basic",
                    entries=[
                        KeyValue(key="username", value=cfg.username_var, type="string"),
                        KeyValue(key="password", value=cfg.password_var, type="string"),
                    ],
                )
                self.uses_basic_auth = True
        elif security.type is SecurityType.OAUTH2:
            request.auth = AuthDescriptor(type="oauth2")
            request.description += OAUTH2_NOTE
            logger.warning("OAuth2 detected for %s. Requires manual Postman configuration.", request.operation_id)
        elif security.type is SecurityType.OPENID_CONNECT:
            request.description += OPENID_NOTE
            logger.warning("OpenID Connect detected for %s. Requires manual Postman configuration.", request.operation_id)

    # -- parameters -------------------------------------------------------------

    def placeholder_value(self, name: str, location: ParamLocation, schema: dict) -> str:
        if location is ParamLocation.PATH and "id" in name.lower():
            return self.config.resource_id_var
        example = self.examples.values.value_for(schema)
        if example is not None and not isinstance(example, (dict, list)):
            return stringify(example)
        return f"{{{{{name}_{schema.get('type') or 'value'}}}}}"

    def to_param(self, param: dict) -> Param | None:
        if param.get("in") in ("body", "formData"):
            return None  # Swagger 2.0 payload parameters, handled as the body
        try:
            location = ParamLocation(param.get("in"))
        except ValueError:
            logger.warning("Skipping parameter %r with unsupported location %r", param.get("name"), param.get("in"))
            return None
        name = str(param.get("name") or "")
        schema = param.get("schema")
        if not isinstance(schema, dict):
            # Swagger 2.0 keeps type/format on the parameter itself
            schema = {k: v for k, v in param.items() if k in ("type", "format", "enum", "pattern", "minimum", "maximum", "items", "default")}
        description = str(param.get("description") or schema.get("description") or f"{location.value} parameter")
        return Param(
            name=name,
            location=location,
            required=bool(param.get("required", False)),
            value=self.placeholder_value(name, location, schema),
            description=description,
            param_schema=schema,
        )

    def _apply_parameter(self, request: RequestDescriptor, raw: dict, security: SecurityDescriptor | None) -> None:
        param = self.to_param(raw)
        if param is None:
            return
        request.parameters.append(param)
        described = param.description + (" (Required)" if param.required else "")

        if param.location is ParamLocation.PATH:
            request.path_variables.append(KeyValue(key=param.name, value=param.value, description=described))
        elif param.location is ParamLocation.QUERY:
            request.query.append(
                KeyValue(key=param.name, value=param.value, description=described, disabled=not param.required)
            )
        elif param.location is ParamLocation.HEADER:
            is_auth_header = security is not None and security.location == "header" and security.name == param.name
            if is_auth_header or param.name.lower() == "content-type":
                return
            request.headers.append(
                KeyValue(key=param.name, value=param.value, description=described, disabled=not param.required)
            )
        elif param.location is ParamLocation.COOKIE:
            request.headers.append(
                KeyValue(
                    key="Cookie",
                    value=f"{param.name}={param.value}",
                    description=f"Cookie Param: {described}",
                    disabled=not param.required,
                )
            )

    # -- body -----------------------------------------------------------------

    def body_source(self, operation: dict) -> tuple[str, dict] | None:
        """``(content_type, schema)`` of the request body, if any.

        Falls back to a Swagger 2.0 ``in: body`` parameter.
        """
        request_body = deref(operation.get("requestBody"), self.spec)
        if isinstance(request_body, dict):
            picked = pick_body_content(request_body.get("content") or {})
            if picked is None:
                return None
            declared, effective = picked
            media = request_body["content"][declared]
            schema = media.get("schema") if isinstance(media, dict) else None
            return (effective, schema) if schema else None

        for raw in operation.get("parameters") or []:
            param = deref(raw, self.spec)
            if isinstance(param, dict) and param.get("in") == "body" and param.get("schema"):
                consumes = operation.get("consumes") or self.spec.get("consumes") or ["application/json"]
                return consumes[0], param["schema"]
        return None

    def _build_body(self, request: RequestDescriptor, operation_id: str, content_type: str, schema: dict) -> RequestBody:
        example = self.examples.build(schema)
        if content_type == "application/x-www-form-urlencoded":
            mode = BodyMode.URLENCODED
        elif content_type == "multipart/form-data":
            mode = BodyMode.FORMDATA
        else:
            mode = BodyMode.RAW

        body = RequestBody(mode=mode, content_type=content_type)
        if mode is BodyMode.RAW:
            request.headers.append(KeyValue(key="Content-Type", value=content_type))
            try:
                body.raw = json.dumps(example, indent=2, ensure_ascii=False)
                body.language = "json"
            except (TypeError, ValueError) as e:
                logger.warning("Could not serialize body example for %s: %s", operation_id, e)
                body.raw = f"// Error generating example: {e}\n{example!r}"
            return body

        resolved = deref(schema, self.spec)
        properties = (resolved.get("properties") if isinstance(resolved, dict) else None) or {}
        if isinstance(example, dict):
            for key, value in example.items():
                prop_schema = deref(properties.get(key), self.spec)
                prop_schema = prop_schema if isinstance(prop_schema, dict) else {}
                if prop_schema.get("readOnly"):
                    continue
                description = str(prop_schema.get("description") or "")
                is_file = prop_schema.get("type") == "string" and prop_schema.get("format") in ("binary", "byte")
                if mode is BodyMode.FORMDATA and is_file:
                    body.fields.append(KeyValue(key=str(key), type="file", description=description))
                    body.file_fields.append(str(key))
                else:
                    body.fields.append(KeyValue(key=str(key), value=stringify(value), description=description))
        return body
