"""Markdown generator — documents every operation of one endpoint."""

import logging

from docfinder.generator.constants import MAX_RECURSION_DEPTH, METHOD_ORDER
from docfinder.generator.operation import OperationRenderer
from docfinder.parser.base import ApiDocument, PathItem

logger = logging.getLogger(__name__)


def ordered_methods(path_item: PathItem) -> list[str]:
    """Methods defined on a path item in canonical order.

    Methods outside ``METHOD_ORDER`` come last, alphabetically.
    """
    rank = {method: i for i, method in enumerate(METHOD_ORDER)}
    return sorted(path_item.operations, key=lambda m: (rank.get(m, len(rank)), m))


class MarkdownGenerator:
    """Generates endpoint documentation from a loaded OpenAPI document."""

    def __init__(self, document: ApiDocument, max_depth: int = MAX_RECURSION_DEPTH):
        self.document = document
        self.renderer = OperationRenderer(max_depth=max_depth)

    def generate(self, path: str, path_item: PathItem | None, method: str = "") -> str:
        """Return Markdown for ``path``.

        ``method`` is an upper-case HTTP method to restrict the output to,
        or an empty string for every operation on the path.
        """
        if path_item is None:
            return ""

        md: list[str] = []
        self._write_header(md, path)
        self._write_operations(md, path, path_item, method)
        return "".join(md)

    def _write_header(self, md: list[str], path: str) -> None:
        md.append(f"# API Endpoint: {path}\n\n")

        info = self.document.info
        if info is not None:
            md.append(f"**API:** {info.title} {info.version}\n\n")

        if self.document.servers:
            md.append("**Base URL(s):**\n")
            for server in self.document.servers:
                if server.description:
                    md.append(f"- `{server.url}` - {server.description}\n")
                else:
                    md.append(f"- `{server.url}`\n")
            md.append("\n")

    def _write_operations(self, md: list[str], path: str, path_item: PathItem, method_filter: str) -> None:
        for method in ordered_methods(path_item):
            operation = path_item.operations[method]
            section = self.renderer.render_filtered(method, path, operation, method_filter)
            if section:
                logger.debug("Rendered %s %s", method, path)
                md.append(section)
