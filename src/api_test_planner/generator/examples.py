"""Recursive example payloads for arbitrary (possibly recursive) schemas."""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from api_test_planner.parser.refs import resolve_ref

from .values import ValueGenerator, primary_type

DEFAULT_MAX_ITEMS = 2


def recursion_marker(ref: str) -> str:
    return f"/* Recursive reference: {ref} */"


def required_placeholder(name: str) -> str:
    return f"{{{{{name}_value}}}}"


def _is_primitive(value: Any) -> bool:
    return not isinstance(value, (dict, list))


class ExampleBuilder:
    """Builds full example payloads by walking a schema.

    Precedence per node: ``$ref`` (with cycle guard), explicit
    ``example``/``default``, ``allOf``, ``oneOf``/``anyOf``, object, array,
    then the primitive generator. Never raises: unresolvable nodes degrade
    to empty containers or placeholder strings.

    ``visited`` is a frozenset, so every branch carries its own copy of the
    refs seen on the way down.
    """

    def __init__(
        self,
        spec: dict,
        values: ValueGenerator | None = None,
        composition_policy: str = "first",
        clock: Callable[[], datetime] | None = None,
        uuid_factory: Callable | None = None,
    ):
        self.spec = spec
        self.values = values or ValueGenerator(spec, clock=clock, uuid_factory=uuid_factory, example_builder=self)
        self.composition_policy = composition_policy

    def build(self, schema: Any, visited: frozenset = frozenset()) -> Any:
        if not isinstance(schema, dict):
            return {}

        ref = schema.get("$ref")
        if ref:
            if ref in visited:
                return recursion_marker(ref)
            resolved = resolve_ref(ref, self.spec)
            if not isinstance(resolved, dict):
                return {}
            return self.build(resolved, visited | {ref})

        if "example" in schema:
            return schema["example"]
        if "default" in schema:
            return schema["default"]

        if isinstance(schema.get("allOf"), list):
            return self._build_all_of(schema["allOf"], visited)

        for keyword in ("oneOf", "anyOf"):
            branches = schema.get(keyword)
            if isinstance(branches, list) and branches:
                return self.build(self.choose_branch(branches), visited)

        schema_type, _ = primary_type(schema)
        if schema_type == "object":
            return self._build_object(schema, visited)
        if schema_type == "array" and "items" in schema:
            return self._build_array(schema, visited)
        return self.values.value_for(schema)

    def choose_branch(self, branches: list) -> Any:
        """Pick the oneOf/anyOf branch used for the example."""
        if self.composition_policy == "widest":
            return max(branches, key=self._property_count)
        return branches[0]

    def _property_count(self, branch: Any) -> int:
        if isinstance(branch, dict) and "$ref" in branch:
            branch = resolve_ref(branch["$ref"], self.spec)
        if not isinstance(branch, dict):
            return -1
        return len(branch.get("properties") or {})

    def _build_all_of(self, parts: list, visited: frozenset) -> Any:
        combined: Any = {}
        for part in parts:
            example = self.build(part, visited)
            if isinstance(example, dict) and isinstance(combined, dict):
                combined.update(example)
            elif not isinstance(example, dict):
                if not isinstance(combined, dict) or not combined:
                    combined = example

        typed = next(
            (p for p in parts if isinstance(p, dict) and p.get("type") and p.get("type") != "object"),
            None,
        )
        if typed is not None:
            value = self.build(typed, visited)
            if _is_primitive(value) and (not isinstance(combined, dict) or not combined):
                return value
        return combined

    def _build_object(self, schema: dict, visited: frozenset) -> dict:
        example = {}
        properties = schema.get("properties")
        additional = schema.get("additionalProperties")
        if isinstance(properties, dict):
            for name, prop_schema in properties.items():
                if isinstance(prop_schema, dict) and prop_schema.get("readOnly"):
                    continue
                example[name] = self.build(prop_schema, visited)
        elif isinstance(additional, dict) and additional:
            example["additionalProp1"] = self.build(additional, visited)

        required = schema.get("required")
        if isinstance(required, list):
            properties = properties if isinstance(properties, dict) else {}
            for name in required:
                prop_schema = properties.get(name)
                read_only = isinstance(prop_schema, dict) and prop_schema.get("readOnly") is True
                if name not in example and not read_only:
                    example[name] = required_placeholder(name)
        return example

    def _build_array(self, schema: dict, visited: frozenset) -> list:
        min_items = schema.get("minItems")
        max_items = schema.get("maxItems")
        min_items = 1 if min_items is None else min_items
        count = max(min_items, 0 if (min_items == 0 and max_items == 0) else 1)
        limit = min(count, 0 if max_items == 0 else (DEFAULT_MAX_ITEMS if max_items is None else max_items))
        return [self.build(schema["items"], visited) for _ in range(limit)]
