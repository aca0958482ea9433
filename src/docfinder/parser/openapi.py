"""OpenAPI 3.x document loader.

Reads a YAML or JSON file into an ApiDocument. ``$ref``s are resolved
while loading, both local pointers and relative references into sibling
files; each referenced schema is built once and shared, so recursive
definitions become a cyclic Schema graph rather than an infinite
expansion.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import yaml

from docfinder.errors import DocumentError, EndpointNotFoundError
from docfinder.parser.base import (
    ApiDocument,
    Example,
    Header,
    Info,
    MediaType,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
    Response,
    Schema,
    Server,
)
from docfinder.parser.detect import detect_openapi_version

logger = logging.getLogger(__name__)

PATH_ITEM_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_TEMPLATE_SEGMENT = re.compile(r"\{[^}/]*\}")

# (file, JSON pointer); file is None for a document parsed from memory.
RefKey = tuple[Path | None, str]


def load_document(file_path: Path) -> ApiDocument:
    """Load an OpenAPI 3 file into an ApiDocument."""
    logger.debug("Loading OpenAPI document from %s", file_path)
    data = _read_data(file_path)

    version = detect_openapi_version(data)
    logger.debug("Detected OpenAPI version %s", version)
    return parse_document(data, source=file_path)


def parse_document(data: dict, source: Path | None = None) -> ApiDocument:
    """Build an ApiDocument from an already-parsed OpenAPI mapping.

    ``source`` is the file the mapping came from; relative file ``$ref``s
    are resolved against its directory. Without it only local refs resolve.
    """
    return _DocumentBuilder(data, source).build()


def _read_data(file_path: Path) -> Any:
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentError(f"failed to read {file_path}: {e}") from e

    try:
        if file_path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise DocumentError(f"failed to load OpenAPI file {file_path}: {e}") from e


def normalize_endpoint_path(path: str) -> str:
    """Ensure the endpoint path starts with a slash."""
    if not path.startswith("/"):
        return "/" + path
    return path


def find_path_item(document: ApiDocument, endpoint_path: str) -> PathItem:
    """Look up a path item by exact path, then by template shape.

    ``/items/{id}`` also finds ``/items/{itemId}``, since only the
    position of a template segment matters, not its parameter name.
    """
    if document.paths is None:
        raise DocumentError("OpenAPI document has no paths defined")

    path_item = document.paths.get(endpoint_path)
    if path_item is not None:
        return path_item

    wanted = _TEMPLATE_SEGMENT.sub("{}", endpoint_path)
    for candidate in sorted(document.paths):
        if _TEMPLATE_SEGMENT.sub("{}", candidate) == wanted:
            logger.debug("Matched %s to templated path %s", endpoint_path, candidate)
            return document.paths[candidate]

    raise EndpointNotFoundError(endpoint_path)


class _DocumentBuilder:
    """Converts raw OpenAPI data to models, resolving ``$ref`` on the way.

    Every raw node is read in the context of the file it came from, so a
    ``#/...`` ref inside a referenced file points into that file.
    """

    def __init__(self, data: dict, source: Path | None = None):
        self.data = data
        self.source = source.resolve() if source is not None else None
        self._documents: dict[Path | None, Any] = {self.source: data}
        self._schemas: dict[RefKey, Schema | None] = {}

    def build(self) -> ApiDocument:
        data = self.data
        info = data.get("info")
        paths = data.get("paths")

        return ApiDocument(
            openapi=_text(data.get("openapi")),
            info=Info(title=_text(info.get("title")), version=_text(info.get("version")))
            if isinstance(info, dict)
            else None,
            servers=self._servers(data.get("servers")),
            paths={str(path): self._path_item(item, self.source) for path, item in paths.items()}
            if isinstance(paths, dict)
            else None,
        )

    # -- references -----------------------------------------------------------

    def _ref_key(self, ref: Any, source: Path | None) -> RefKey | None:
        """Split a ``$ref`` into the file it targets and a JSON pointer."""
        if not isinstance(ref, str):
            logger.warning("Unsupported $ref %r treated as absent", ref)
            return None

        location, _, pointer = ref.partition("#")
        if (pointer and not pointer.startswith("/")) or not (location or pointer):
            logger.warning("Unsupported $ref %r treated as absent", ref)
            return None
        if not location:
            return source, pointer

        if "://" in location or source is None:
            logger.warning("Unsupported $ref %r treated as absent", ref)
            return None
        return (source.parent / unquote(location)).resolve(), pointer

    def _document(self, file: Path | None) -> Any:
        """Raw data of a referenced file, read once per file."""
        if file not in self._documents:
            logger.debug("Loading referenced document %s", file)
            self._documents[file] = _read_data(file)
        return self._documents[file]

    def _lookup(self, key: RefKey, ref: str) -> Any:
        """Follow one JSON pointer into the targeted document."""
        file, pointer = key
        node = self._document(file)
        for token in pointer.split("/")[1:]:
            token = unquote(token).replace("~1", "/").replace("~0", "~")
            if isinstance(node, dict) and token in node:
                node = node[token]
            elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
                node = node[int(token)]
            else:
                logger.warning("Unresolved $ref %s treated as absent", ref)
                return None
        return node

    def _resolve(self, node: Any, source: Path | None) -> tuple[dict | None, Path | None]:
        """Resolve a (possibly chained) ``$ref`` to a plain mapping and its file."""
        seen = set()
        while isinstance(node, dict) and "$ref" in node:
            ref = node["$ref"]
            key = self._ref_key(ref, source)
            if key is None:
                return None, source
            if key in seen:
                logger.warning("Circular $ref %s treated as absent", ref)
                return None, source
            seen.add(key)
            source = key[0]
            node = self._lookup(key, ref)
        return (node if isinstance(node, dict) else None), source

    # -- schemas --------------------------------------------------------------

    def _schema(self, node: Any, source: Path | None) -> Schema | None:
        if not isinstance(node, dict):
            return None

        if "$ref" not in node:
            schema = _schema_fields(node)
            self._fill_schema(schema, node, source)
            return schema

        ref = node["$ref"]
        key = self._ref_key(ref, source)
        if key is None:
            return None
        if key in self._schemas:
            return self._schemas[key]

        target = self._lookup(key, ref)
        if not isinstance(target, dict):
            return None

        if "$ref" in target:
            # Placeholder stops a ref that points back to itself.
            self._schemas[key] = None
            self._schemas[key] = self._schema(target, key[0])
            return self._schemas[key]

        schema = _schema_fields(target)
        self._schemas[key] = schema
        self._fill_schema(schema, target, key[0])
        return schema

    def _fill_schema(self, schema: Schema, raw: dict, source: Path | None) -> None:
        """Attach child schemas after the parent is registered, so cycles close."""
        properties = raw.get("properties")
        if isinstance(properties, dict):
            children = {}
            for name, sub in properties.items():
                child = self._schema(sub, source)
                if child is not None:
                    children[str(name)] = child
            schema.properties = children

        schema.items = self._schema(raw.get("items"), source)

        for attr, key in (("one_of", "oneOf"), ("any_of", "anyOf"), ("all_of", "allOf")):
            members = raw.get(key)
            if isinstance(members, list):
                setattr(schema, attr, [self._schema(m, source) for m in members])

    # -- path items and operations --------------------------------------------

    def _path_item(self, node: Any, source: Path | None) -> PathItem:
        raw, source = self._resolve(node, source)
        operations = {}
        for method in PATH_ITEM_METHODS:
            op, op_source = self._resolve((raw or {}).get(method), source)
            if op is not None:
                operations[method.upper()] = self._operation(op, op_source)
        return PathItem(operations=operations)

    def _operation(self, raw: dict, source: Path | None) -> Operation:
        security = raw.get("security")
        tags = raw.get("tags")
        return Operation(
            summary=_text(raw.get("summary")),
            description=_text(raw.get("description")),
            operation_id=_text(raw.get("operationId")),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            deprecated=raw.get("deprecated") is True,
            parameters=self._parameters(raw.get("parameters"), source),
            request_body=self._request_body(raw.get("requestBody"), source),
            responses=self._responses(raw.get("responses"), source),
            security=_security(security) if isinstance(security, list) else None,
        )

    def _parameters(self, nodes: Any, source: Path | None) -> list[Parameter]:
        if not isinstance(nodes, list):
            return []

        result = []
        for node in nodes:
            raw, raw_source = self._resolve(node, source)
            if raw is None or "name" not in raw:
                continue

            schema = self._schema(raw.get("schema"), raw_source)
            if schema is None:
                # Parameters may describe themselves through a content map instead.
                content = self._content(raw.get("content"), raw_source)
                for content_type in sorted(content):
                    schema = content[content_type].schema_
                    break

            result.append(
                Parameter(
                    name=str(raw["name"]),
                    location=_text(raw.get("in")),
                    required=raw.get("required") is True,
                    deprecated=raw.get("deprecated") is True,
                    description=_text(raw.get("description")),
                    schema_=schema,
                )
            )
        return result

    def _request_body(self, node: Any, source: Path | None) -> RequestBody | None:
        raw, source = self._resolve(node, source)
        if raw is None:
            return None
        return RequestBody(
            description=_text(raw.get("description")),
            required=raw.get("required") is True,
            content=self._content(raw.get("content"), source),
        )

    def _responses(self, nodes: Any, source: Path | None) -> dict[str, Response]:
        if not isinstance(nodes, dict):
            return {}

        result = {}
        for status, node in nodes.items():
            raw, raw_source = self._resolve(node, source)
            if raw is None:
                continue
            description = raw.get("description")
            result[str(status)] = Response(
                description=None if description is None else str(description),
                headers=self._headers(raw.get("headers"), raw_source),
                content=self._content(raw.get("content"), raw_source),
            )
        return result

    def _headers(self, nodes: Any, source: Path | None) -> dict[str, Header]:
        if not isinstance(nodes, dict):
            return {}

        result = {}
        for name, node in nodes.items():
            raw, raw_source = self._resolve(node, source)
            if raw is not None:
                result[str(name)] = Header(
                    description=_text(raw.get("description")),
                    schema_=self._schema(raw.get("schema"), raw_source),
                )
        return result

    def _content(self, nodes: Any, source: Path | None) -> dict[str, MediaType]:
        if not isinstance(nodes, dict):
            return {}

        result = {}
        for content_type, raw in nodes.items():
            if not isinstance(raw, dict):
                continue
            result[str(content_type)] = MediaType(
                schema_=self._schema(raw.get("schema"), source),
                examples=self._examples(raw.get("examples"), source),
            )
        return result

    def _examples(self, nodes: Any, source: Path | None) -> dict[str, Example]:
        if not isinstance(nodes, dict):
            return {}

        result = {}
        for name, node in nodes.items():
            raw, _ = self._resolve(node, source)
            if raw is not None:
                result[str(name)] = Example(
                    summary=_text(raw.get("summary")),
                    value=raw.get("value"),
                )
        return result

    def _servers(self, nodes: Any) -> list[Server]:
        if not isinstance(nodes, list):
            return []
        return [
            Server(url=_text(raw.get("url")), description=_text(raw.get("description")))
            for raw in nodes
            if isinstance(raw, dict) and raw.get("url")
        ]


def _schema_fields(raw: dict) -> Schema:
    """Build a Schema from the scalar keywords of a raw schema; children come later."""
    declared = raw.get("type")
    if isinstance(declared, str):
        types = [declared]
    elif isinstance(declared, list):
        types = [str(t) for t in declared]
    else:
        types = []

    example = raw.get("example")
    examples = raw.get("examples")
    if example is None and isinstance(examples, list) and examples:
        example = examples[0]

    enum = raw.get("enum")
    required = raw.get("required")
    minimum, exclusive_minimum = _bound(raw, "minimum", "exclusiveMinimum")
    maximum, exclusive_maximum = _bound(raw, "maximum", "exclusiveMaximum")

    return Schema(
        type=types,
        format=_text(raw.get("format")),
        description=_text(raw.get("description")),
        nullable=raw.get("nullable") is True,
        deprecated=raw.get("deprecated") is True,
        default=raw.get("default"),
        example=example,
        enum=list(enum) if isinstance(enum, list) else [],
        min_length=_count(raw.get("minLength")) or 0,
        max_length=_count(raw.get("maxLength")),
        pattern=_text(raw.get("pattern")),
        minimum=minimum,
        maximum=maximum,
        exclusive_minimum=exclusive_minimum,
        exclusive_maximum=exclusive_maximum,
        multiple_of=_number(raw.get("multipleOf")),
        min_items=_count(raw.get("minItems")) or 0,
        max_items=_count(raw.get("maxItems")),
        unique_items=raw.get("uniqueItems") is True,
        min_properties=_count(raw.get("minProperties")) or 0,
        max_properties=_count(raw.get("maxProperties")),
        required=[str(r) for r in required] if isinstance(required, list) else [],
    )


def _bound(raw: dict, key: str, exclusive_key: str) -> tuple[int | float | None, bool]:
    """Read a numeric bound in either the 3.0 (boolean flag) or 3.1 (numeric) style."""
    exclusive = raw.get(exclusive_key)
    if isinstance(exclusive, bool):
        return _number(raw.get(key)), exclusive
    if _number(exclusive) is not None:
        return exclusive, True
    return _number(raw.get(key)), False


def _number(value: Any) -> int | float | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def _count(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _security(requirements: list) -> list[dict[str, list[str]]]:
    result = []
    for requirement in requirements:
        if isinstance(requirement, dict):
            result.append(
                {
                    str(name): [str(s) for s in scopes] if isinstance(scopes, list) else []
                    for name, scopes in requirement.items()
                }
            )
    return result
