"""Operation renderer — turns one HTTP operation into a Markdown section."""

from docfinder.generator.constants import (
    DEPRECATION_WARNING,
    HEADER_EXAMPLES,
    HEADER_HEADERS,
    HEADER_PARAMETERS,
    HEADER_REQUEST_BODY,
    HEADER_RESPONSES,
    HEADER_SCHEMA,
    HEADER_SECURITY,
    MARKER_DEPRECATED,
    MARKER_REQUIRED,
    MAX_RECURSION_DEPTH,
    SEPARATOR_OPERATION,
)
from docfinder.generator.formatter import (
    format_constraints,
    format_json,
    format_type,
    format_value,
    sorted_keys,
)
from docfinder.generator.schema import format_schema
from docfinder.parser.base import (
    Example,
    Header,
    MediaType,
    Operation,
    Parameter,
    RequestBody,
    Response,
)


class OperationRenderer:
    """Renders the metadata, parameters, bodies, responses and security of an operation."""

    def __init__(self, max_depth: int = MAX_RECURSION_DEPTH):
        self.max_depth = max_depth

    def render(self, method: str, path: str, operation: Operation) -> str:
        """Return the ``## METHOD path`` section for one operation, ending with ``---``."""
        md: list[str] = [f"## {method.upper()} {path}\n\n"]

        self._write_metadata(md, operation)
        self._write_parameters(md, operation.parameters)
        self._write_request_body(md, operation.request_body)
        self._write_responses(md, operation.responses)
        self._write_security(md, operation.security)

        md.append(SEPARATOR_OPERATION)
        return "".join(md)

    def render_filtered(self, method: str, path: str, operation: Operation, method_filter: str = "") -> str:
        """Render the operation only if it matches ``method_filter`` (empty matches all)."""
        if method_filter and method != method_filter:
            return ""
        return self.render(method, path, operation)

    # -- metadata -------------------------------------------------------------

    def _write_metadata(self, md: list[str], operation: Operation) -> None:
        if operation.deprecated:
            md.append(DEPRECATION_WARNING)
        if operation.summary:
            md.append(f"**Summary:** {operation.summary}\n\n")
        if operation.description:
            md.append(f"**Description:** {operation.description}\n\n")
        if operation.operation_id:
            md.append(f"**Operation ID:** `{operation.operation_id}`\n\n")
        if operation.tags:
            md.append(f"**Tags:** {', '.join(operation.tags)}\n\n")

    # -- parameters -----------------------------------------------------------

    def _write_parameters(self, md: list[str], parameters: list[Parameter]) -> None:
        if not parameters:
            return

        md.append(HEADER_PARAMETERS)

        # Declaration order is meaningful for parameters; never sort them.
        for param in parameters:
            required = MARKER_REQUIRED if param.required else ""
            deprecated = MARKER_DEPRECATED if param.deprecated else ""
            md.append(f"- **{param.name}** ({param.location}){required}{deprecated}\n")

            if param.description:
                md.append(f"  - Description: {param.description}\n")

            schema = param.schema_
            if schema is None:
                continue
            md.append(f"  - Type: `{format_type(schema)}`\n")
            if schema.format:
                md.append(f"  - Format: `{schema.format}`\n")
            if schema.default is not None:
                md.append(f"  - Default: `{format_value(schema.default)}`\n")
            if schema.example is not None:
                md.append(f"  - Example: `{format_value(schema.example)}`\n")
            constraints = format_constraints(schema)
            if constraints:
                md.append(f"  - Constraints: {constraints}\n")
            if schema.enum:
                md.append(f"  - Allowed values: {format_value(schema.enum)}\n")

        md.append("\n")

    # -- bodies ---------------------------------------------------------------

    def _write_request_body(self, md: list[str], body: RequestBody | None) -> None:
        if body is None:
            return

        md.append(HEADER_REQUEST_BODY)
        if body.description:
            md.append(f"{body.description}\n\n")
        md.append(f"**Required:** ({'required' if body.required else 'optional'})\n\n")

        self._write_content(md, body.content)
        md.append("\n")

    def _write_responses(self, md: list[str], responses: dict[str, Response]) -> None:
        if not responses:
            return

        md.append(HEADER_RESPONSES)

        for status in sorted_keys(responses):
            response = responses[status]
            md.append(f"#### {status}\n\n")
            if response.description is not None:
                md.append(f"{response.description}\n\n")

            self._write_headers(md, response.headers)
            self._write_content(md, response.content)
            md.append("\n")

    def _write_content(self, md: list[str], content: dict[str, MediaType]) -> None:
        for content_type in sorted_keys(content):
            media = content[content_type]
            md.append(f"**Content-Type:** `{content_type}`\n\n")
            if media.schema_ is not None:
                md.append(HEADER_SCHEMA)
                md.append(format_schema(media.schema_, 0, self.max_depth))

            self._write_examples(md, media.examples)

    def _write_headers(self, md: list[str], headers: dict[str, Header]) -> None:
        if not headers:
            return

        md.append(HEADER_HEADERS)

        for name in sorted_keys(headers):
            header = headers[name]
            desc = f" - {header.description}" if header.description else ""
            md.append(f"- `{name}`{desc}\n")
            if header.schema_ is not None:
                md.append(f"  - Type: `{format_type(header.schema_)}`\n")

        md.append("\n")

    def _write_examples(self, md: list[str], examples: dict[str, Example]) -> None:
        if not examples:
            return

        md.append(HEADER_EXAMPLES)

        for name in sorted_keys(examples):
            example = examples[name]
            if example.summary:
                md.append(f"*{example.summary}* (`{name}`):\n\n")
            else:
                md.append(f"*Example: `{name}`*:\n\n")

            try:
                rendered = format_json(example.value)
            except (TypeError, ValueError):
                md.append(f"```\n{example.value}\n```\n\n")
            else:
                md.append(f"```json\n{rendered}\n```\n\n")

    # -- security -------------------------------------------------------------

    def _write_security(self, md: list[str], security: list[dict[str, list[str]]] | None) -> None:
        if not security:
            return

        md.append(HEADER_SECURITY)

        for requirement in security:
            for scheme in sorted_keys(requirement):
                scopes = requirement[scheme]
                if scopes:
                    md.append(f"- **{scheme}**: {', '.join(scopes)}\n")
                else:
                    md.append(f"- **{scheme}**\n")

        md.append("\n")
