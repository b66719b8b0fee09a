"""Primitive example values for schema nodes."""

import base64
import logging
import math
import re
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from api_test_planner.parser.refs import resolve_ref

logger = logging.getLogger(__name__)

BYTE_SAMPLE = base64.b64encode(b"Swagger rocks").decode("ascii")
BINARY_PLACEHOLDER = "<<binary data placeholder>>"
UNKNOWN_TYPE_VALUE = "unknown_type_value"

# Bounded nudging towards a valid multipleOf
MAX_NUDGES = 1000

_DIGIT_PATTERN = re.compile(r"^\^?(\\d|\[0-9\])(\+|\*|\{\d+(,\d*)?\})?\$?$")
_ALPHA_PATTERN = re.compile(r"^\^?\[(a-z|A-Z|a-zA-Z|A-Za-z)\](\+|\*|\{\d+(,\d*)?\})?\$?$")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def primary_type(schema: dict) -> tuple[str | None, bool]:
    """Return ``(type, nullable)`` for a schema node.

    ``type`` may be a list (OpenAPI 3.1); the first non-null entry wins.
    """
    raw = schema.get("type")
    nullable = schema.get("nullable") is True
    if isinstance(raw, list):
        nullable = nullable or "null" in raw
        types = [t for t in raw if t != "null"]
        return (types[0] if types else None), nullable
    return raw, nullable


class ValueGenerator:
    """Produces a single example value from type, format, enum and bounds.

    ``clock`` and ``uuid_factory`` are the only non-deterministic inputs;
    inject fixed ones for reproducible output.
    """

    def __init__(
        self,
        spec: dict,
        clock: Callable[[], datetime] | None = None,
        uuid_factory: Callable[[], uuid.UUID] | None = None,
        example_builder=None,
    ):
        self.spec = spec
        self.clock = clock or _utc_now
        self.uuid_factory = uuid_factory or uuid.uuid4
        self._example_builder = example_builder

    @property
    def example_builder(self):
        if self._example_builder is None:
            from .examples import ExampleBuilder

            self._example_builder = ExampleBuilder(self.spec, values=self)
        return self._example_builder

    def value_for(self, schema: dict | None) -> Any:
        schema = schema if isinstance(schema, dict) else {}
        if "example" in schema:
            return schema["example"]
        if "default" in schema:
            return schema["default"]

        schema_type, nullable = primary_type(schema)
        if schema_type is None and nullable and "type" in schema:
            return None

        ref = schema.get("$ref")
        if ref:
            resolved = resolve_ref(ref, self.spec)
            if resolved is None:
                return f"{{{{ref_{ref.rsplit('/', 1)[-1]}}}}}"
            return self.example_builder.build(resolved, frozenset({ref}))

        enum = schema.get("enum")
        if isinstance(enum, list) and enum:
            return enum[0]

        schema_type = schema_type or "string"
        if schema_type == "string":
            return self._string(schema)
        if schema_type in ("integer", "number"):
            return self._number(schema, integer=schema_type == "integer")
        if schema_type == "boolean":
            return True
        if schema_type == "array":
            return []
        if schema_type == "object":
            return {"property": "value"}
        return None if nullable else UNKNOWN_TYPE_VALUE

    def _string(self, schema: dict) -> str:
        fmt = schema.get("format")
        if fmt == "date-time":
            return self.clock().isoformat().replace("+00:00", "Z")
        if fmt == "date":
            return self.clock().date().isoformat()
        if fmt == "email":
            return "user@example.com"
        if fmt == "uuid":
            return str(self.uuid_factory())
        if fmt == "byte":
            return BYTE_SAMPLE
        if fmt == "binary":
            return BINARY_PLACEHOLDER

        pattern = schema.get("pattern")
        if pattern:
            return _guess_from_pattern(pattern)

        value = "string"
        min_length = schema.get("minLength")
        max_length = schema.get("maxLength")
        if min_length is not None:
            value = "s" * max(len(value), min_length)
        if max_length is not None and len(value) > max_length:
            value = value[:max_length]
            if min_length is not None and min_length > max_length:
                logger.warning("Contradictory minLength(%s) / maxLength(%s); using minLength", min_length, max_length)
                value = "s" * min_length
        return value

    def _number(self, schema: dict, integer: bool) -> int | float:
        step = 1 if integer else 0.001
        minimum = schema.get("minimum")
        maximum = schema.get("maximum")
        exclusive_min = schema.get("exclusiveMinimum")
        exclusive_max = schema.get("exclusiveMaximum")
        multiple_of = schema.get("multipleOf")

        # exclusive* is a boolean modifier in OpenAPI 3.0 and a bound of its own in 3.1
        if _is_number(exclusive_min):
            min_bound, min_inclusive = exclusive_min, False
        else:
            min_bound, min_inclusive = minimum, exclusive_min is not True
        if _is_number(exclusive_max):
            max_bound, max_inclusive = exclusive_max, False
        else:
            max_bound, max_inclusive = maximum, exclusive_max is not True

        def below_min(n):
            return min_bound is not None and (n < min_bound if min_inclusive else n <= min_bound)

        def above_max(n):
            return max_bound is not None and (n > max_bound if max_inclusive else n >= max_bound)

        lowest = None
        if min_bound is not None:
            lowest = min_bound if min_inclusive else min_bound + step
        num = lowest if lowest is not None else 0

        if max_bound is not None:
            highest = max_bound if max_inclusive else max_bound - step
            if min_bound is None or highest >= num:
                num = highest
            else:
                num = lowest

        if _is_number(multiple_of) and multiple_of > 0:
            num = math.floor(num / multiple_of) * multiple_of if num >= 0 else math.ceil(num / multiple_of) * multiple_of
            nudges = 0
            while below_min(num) and nudges < MAX_NUDGES:
                num += multiple_of
                nudges += 1
            while above_max(num) and nudges < MAX_NUDGES:
                num -= multiple_of
                nudges += 1
                if below_min(num):
                    logger.debug("Bounds and multipleOf are contradictory in %s", schema)
                    num = lowest
                    break

        if _is_number(exclusive_min) and num <= exclusive_min:
            num = exclusive_min + step
        if _is_number(exclusive_max) and num >= exclusive_max:
            num = exclusive_max - step

        if integer:
            return int(math.floor(num + 0.5))
        return round(num, 10) if isinstance(num, float) else num


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _guess_from_pattern(pattern: str) -> str:
    if _DIGIT_PATTERN.match(pattern):
        return "12345"
    if re.search(r"email|@", pattern, re.IGNORECASE):
        return "pattern.email@example.com"
    if _ALPHA_PATTERN.match(pattern):
        return "abc"
    return "string_pattern"
