"""Unified data models for a parsed OpenAPI document.

The loader converts raw YAML/JSON into these models; the Markdown
generator only ever reads them.
"""

from typing import Any

from pydantic import BaseModel


class Schema(BaseModel):
    """A value shape: primitive, object, array, or a composition of schemas.

    Schemas reached through the same ``$ref`` share one instance, so the
    graph may contain cycles.
    """

    type: list[str] = []  # declaration order is kept, e.g. ["string", "null"]
    format: str = ""
    description: str = ""
    nullable: bool = False
    deprecated: bool = False
    default: Any = None
    example: Any = None
    enum: list[Any] = []

    # string
    min_length: int = 0
    max_length: int | None = None
    pattern: str = ""

    # number
    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    multiple_of: int | float | None = None

    # array
    min_items: int = 0
    max_items: int | None = None
    unique_items: bool = False
    items: "Schema | None" = None

    # object
    min_properties: int = 0
    max_properties: int | None = None
    required: list[str] = []
    properties: dict[str, "Schema"] = {}

    one_of: list["Schema | None"] = []
    any_of: list["Schema | None"] = []
    all_of: list["Schema | None"] = []

    def is_type(self, name: str) -> bool:
        return name in self.type


class Example(BaseModel):
    """A named example value attached to a media type."""

    summary: str = ""
    value: Any = None


class MediaType(BaseModel):
    """One representation of a request or response body."""

    schema_: Schema | None = None
    examples: dict[str, Example] = {}


class Parameter(BaseModel):
    """A single operation parameter (query, path, header, or cookie)."""

    name: str
    location: str  # query / path / header / cookie
    required: bool = False
    deprecated: bool = False
    description: str = ""
    schema_: Schema | None = None


class RequestBody(BaseModel):
    description: str = ""
    required: bool = False
    content: dict[str, MediaType] = {}


class Header(BaseModel):
    description: str = ""
    schema_: Schema | None = None


class Response(BaseModel):
    description: str | None = None
    headers: dict[str, Header] = {}
    content: dict[str, MediaType] = {}


class Operation(BaseModel):
    """One HTTP method's contract on a path."""

    summary: str = ""
    description: str = ""
    operation_id: str = ""
    tags: list[str] = []
    deprecated: bool = False
    parameters: list[Parameter] = []
    request_body: RequestBody | None = None
    responses: dict[str, Response] = {}
    security: list[dict[str, list[str]]] | None = None


class PathItem(BaseModel):
    """Operations defined on one path, keyed by upper-case HTTP method."""

    operations: dict[str, Operation] = {}


class Info(BaseModel):
    title: str = ""
    version: str = ""


class Server(BaseModel):
    url: str
    description: str = ""


class ApiDocument(BaseModel):
    """The parts of an OpenAPI document needed to document an endpoint."""

    openapi: str = ""
    info: Info | None = None
    servers: list[Server] = []
    paths: dict[str, PathItem] | None = None
