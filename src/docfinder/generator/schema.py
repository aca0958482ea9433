"""Recursive Markdown rendering of schemas.

Each indent level is two spaces. Recursion is bounded by ``max_depth``,
which every nested call decrements by one, so self-referencing schemas
always terminate.
"""

import logging

from docfinder.generator.constants import (
    MARKER_DEPRECATED,
    MARKER_REQUIRED,
    MAX_DEPTH_REACHED,
    MAX_RECURSION_DEPTH,
)
from docfinder.generator.formatter import (
    format_constraints,
    format_type,
    format_value,
    sorted_keys,
)
from docfinder.parser.base import Schema

logger = logging.getLogger(__name__)

_COMPOSITIONS = (
    ("one_of", "oneOf", "one of the following", "Option"),
    ("any_of", "anyOf", "any of the following", "Option"),
    ("all_of", "allOf", "all of the following", "Schema"),
)


def format_schema(schema: Schema | None, indent: int = 0, max_depth: int = MAX_RECURSION_DEPTH) -> str:
    """Render a schema as an indented Markdown bullet list."""
    if schema is None:
        return ""

    prefix = "  " * indent
    if max_depth <= 0:
        logger.debug("Schema depth limit reached at indent %d", indent)
        return f"{prefix}- {MAX_DEPTH_REACHED}\n"

    lines: list[str] = []

    for attr, keyword, meaning, label in _COMPOSITIONS:
        members = getattr(schema, attr)
        if members:
            _format_composition(lines, keyword, meaning, label, members, prefix, indent, max_depth)
            return "".join(lines)

    if schema.is_type("object"):
        _format_object(lines, schema, prefix, indent, max_depth)
    elif schema.is_type("array"):
        _format_array(lines, schema, prefix, indent, max_depth)
    elif schema.type:
        _format_primitive(lines, schema, prefix)

    return "".join(lines)


def _format_composition(
    lines: list[str],
    keyword: str,
    meaning: str,
    label: str,
    members: list[Schema | None],
    prefix: str,
    indent: int,
    max_depth: int,
) -> None:
    lines.append(f"{prefix}- **{keyword}** ({meaning}):\n")
    for i, member in enumerate(members, start=1):
        lines.append(f"{prefix}  - {label} {i}:\n")
        lines.append(format_schema(member, indent + 2, max_depth - 1))


def _format_object(lines: list[str], schema: Schema, prefix: str, indent: int, max_depth: int) -> None:
    lines.append(f"{prefix}- Type: `object`\n")
    if schema.nullable:
        lines.append(f"{prefix}- Nullable: `true`\n")

    if not schema.properties:
        return

    lines.append(f"{prefix}- Properties:\n")
    required = set(schema.required)

    for name in sorted_keys(schema.properties):
        prop = schema.properties[name]
        marker = MARKER_REQUIRED if name in required else ""
        if prop.deprecated:
            marker += MARKER_DEPRECATED
        if prop.description:
            lines.append(f"{prefix}  - **{name}**{marker}: {prop.description}\n")
        else:
            lines.append(f"{prefix}  - **{name}**{marker}\n")

        detail = prefix + "    "
        lines.append(f"{detail}- Type: `{format_type(prop)}`\n")
        if prop.format:
            lines.append(f"{detail}- Format: `{prop.format}`\n")
        if prop.default is not None:
            lines.append(f"{detail}- Default: `{format_value(prop.default)}`\n")
        if prop.example is not None:
            lines.append(f"{detail}- Example: `{format_value(prop.example)}`\n")
        if prop.nullable:
            lines.append(f"{detail}- Nullable: `true`\n")
        constraints = format_constraints(prop)
        if constraints:
            lines.append(f"{detail}- Constraints: {constraints}\n")
        if prop.enum:
            lines.append(f"{detail}- Allowed values: {format_value(prop.enum)}\n")

        if prop.is_type("object") and prop.properties:
            lines.append(format_schema(prop, indent + 2, max_depth - 1))
        if prop.is_type("array") and prop.items is not None:
            lines.append(f"{detail}- Items:\n")
            lines.append(format_schema(prop.items, indent + 3, max_depth - 1))


def _format_array(lines: list[str], schema: Schema, prefix: str, indent: int, max_depth: int) -> None:
    lines.append(f"{prefix}- Type: `array`\n")
    if schema.nullable:
        lines.append(f"{prefix}- Nullable: `true`\n")

    constraints = format_constraints(schema)
    if constraints:
        lines.append(f"{prefix}- Constraints: {constraints}\n")

    if schema.items is not None:
        lines.append(f"{prefix}- Items:\n")
        lines.append(format_schema(schema.items, indent + 1, max_depth - 1))


def _format_primitive(lines: list[str], schema: Schema, prefix: str) -> None:
    lines.append(f"{prefix}- Type: `{format_type(schema)}`\n")
    if schema.format:
        lines.append(f"{prefix}- Format: `{schema.format}`\n")
    if schema.nullable:
        lines.append(f"{prefix}- Nullable: `true`\n")
    if schema.default is not None:
        lines.append(f"{prefix}- Default: `{format_value(schema.default)}`\n")
    if schema.example is not None:
        lines.append(f"{prefix}- Example: `{format_value(schema.example)}`\n")

    constraints = format_constraints(schema)
    if constraints:
        lines.append(f"{prefix}- Constraints: {constraints}\n")
    if schema.enum:
        lines.append(f"{prefix}- Allowed values: {format_value(schema.enum)}\n")
