"""CLI entry point for docfinder."""

from pathlib import Path
from typing import get_args

import click
from pydantic import ValidationError

from docfinder.config import LogLevel, Settings, get_settings
from docfinder.errors import DocfinderError
from docfinder.generator.document import MarkdownGenerator
from docfinder.logging import configure_logging
from docfinder.parser.detect import is_http_method, validate_input_file, validate_method
from docfinder.parser.openapi import find_path_item, load_document, normalize_endpoint_path

LOG_LEVELS = list(get_args(LogLevel))


def _split_args(args: tuple[str, ...]) -> tuple[str, str, Path]:
    """Split ``[METHOD] ENDPOINT FILE`` into (method, endpoint, file)."""
    if len(args) == 2:
        return "", args[0], Path(args[1])
    if len(args) == 3:
        if not is_http_method(args[0]):
            raise click.UsageError(f"invalid HTTP method: {args[0]}")
        return args[0].upper(), args[1], Path(args[2])
    raise click.UsageError("expected [METHOD] ENDPOINT FILE")


def _load_settings() -> Settings:
    """Settings from the environment, with bad values reported as CLI errors."""
    try:
        return get_settings()
    except ValidationError as e:
        problems = "; ".join(
            f"DOCFINDER_{str(err['loc'][0]).upper()}: {err['msg']}" for err in e.errors()
        )
        raise click.ClickException(f"invalid configuration: {problems}") from e


def _render_endpoint(doc_path: Path, endpoint: str, method: str, max_depth: int, max_file_size: int) -> str:
    """Load the document and render the endpoint. Raises DocfinderError on bad input."""
    validate_input_file(doc_path, max_size=max_file_size)
    document = load_document(doc_path)

    endpoint = normalize_endpoint_path(endpoint)
    path_item = find_path_item(document, endpoint)
    if method:
        validate_method(path_item, method, endpoint)

    return MarkdownGenerator(document, max_depth=max_depth).generate(endpoint, path_item, method)


@click.command()
@click.argument("args", nargs=-1, required=True, metavar="[METHOD] ENDPOINT FILE")
@click.option("--max-depth", type=click.IntRange(min=1), default=None, help="Maximum schema nesting depth to render.")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None, help="Log level for stderr diagnostics.")
def main(args: tuple[str, ...], max_depth: int | None, log_level: str | None):
    """docfinder — print Markdown documentation for one OpenAPI endpoint.

    \b
    Examples:
      docfinder /app/v1/events/{id} openapi.yaml
      docfinder GET /app/v1/events/{id} openapi.yaml
    """
    settings = _load_settings()
    configure_logging(log_level or settings.log_level)

    method, endpoint, doc_path = _split_args(args)
    try:
        markdown = _render_endpoint(
            doc_path,
            endpoint,
            method,
            max_depth=max_depth or settings.max_depth,
            max_file_size=settings.max_file_size,
        )
    except DocfinderError as e:
        raise click.ClickException(str(e)) from e

    click.echo(markdown, nl=False)
