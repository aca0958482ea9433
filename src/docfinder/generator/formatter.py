"""Small formatting helpers used by the schema and operation renderers."""

import json
from collections.abc import Mapping
from typing import Any

from docfinder.parser.base import Schema


def format_type(schema: Schema | None) -> str:
    """Return the display type of a schema.

    ``"unknown"`` when the schema is absent or declares no type; several
    types are joined with ``" | "`` in declaration order.
    """
    if schema is None or not schema.type:
        return "unknown"
    return " | ".join(schema.type)


def format_constraints(schema: Schema | None) -> str:
    """Return the schema's validation constraints as one comma-separated string.

    Lower bounds of 0 are the default and are left out; upper bounds are
    shown whenever they are set, including 0.
    """
    if schema is None:
        return ""

    constraints = []

    # string
    if schema.min_length > 0:
        constraints.append(f"minLength: {schema.min_length}")
    if schema.max_length is not None:
        constraints.append(f"maxLength: {schema.max_length}")
    if schema.pattern:
        constraints.append(f"pattern: `{schema.pattern}`")

    # number
    if schema.minimum is not None:
        exclusive = " (exclusive)" if schema.exclusive_minimum else ""
        constraints.append(f"min: {format_value(schema.minimum)}{exclusive}")
    if schema.maximum is not None:
        exclusive = " (exclusive)" if schema.exclusive_maximum else ""
        constraints.append(f"max: {format_value(schema.maximum)}{exclusive}")
    if schema.multiple_of is not None:
        constraints.append(f"multipleOf: {format_value(schema.multiple_of)}")

    # array
    if schema.min_items > 0:
        constraints.append(f"minItems: {schema.min_items}")
    if schema.max_items is not None:
        constraints.append(f"maxItems: {schema.max_items}")
    if schema.unique_items:
        constraints.append("uniqueItems: true")

    # object
    if schema.min_properties > 0:
        constraints.append(f"minProperties: {schema.min_properties}")
    if schema.max_properties is not None:
        constraints.append(f"maxProperties: {schema.max_properties}")

    return ", ".join(constraints)


def format_value(value: Any) -> str:
    """Render a default/example/enum value as inline text.

    Lists keep their order; mapping keys are sorted. Anything that is not
    JSON-like falls back to ``str()``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    if isinstance(value, Mapping):
        pairs = (f"{k}: {format_value(value[k])}" for k in sorted_keys(value))
        return "{" + ", ".join(pairs) + "}"
    return str(value)


def format_json(value: Any) -> str:
    """Pretty-print a value as JSON with two-space indentation.

    Returns ``"{}"`` for an absent value. Raises ``TypeError`` or
    ``ValueError`` when the value cannot be serialized.
    """
    if value is None:
        return "{}"
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False)


def sorted_keys(mapping: Mapping) -> list:
    """Return the keys of a mapping in ascending order.

    Every name-keyed mapping is iterated through this so the output does
    not depend on how the source document ordered it.
    """
    return sorted(mapping, key=str)
