"""Input checks run before and after loading an OpenAPI document."""

from pathlib import Path

from docfinder.config import MAX_FILE_SIZE
from docfinder.errors import DocumentError, InputFileError, MethodNotFoundError
from docfinder.parser.base import PathItem

SUPPORTED_EXTENSIONS = (".yaml", ".yml", ".json")

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE")


def validate_input_file(file_path: Path, max_size: int = MAX_FILE_SIZE) -> None:
    """Check that the file exists, is a regular file of sane size, and looks like YAML/JSON."""
    if not file_path.exists():
        raise InputFileError(f"file does not exist: {file_path}")
    if file_path.is_dir():
        raise InputFileError(f"path is a directory, not a file: {file_path}")

    size = file_path.stat().st_size
    if size > max_size:
        raise InputFileError(f"file too large: {size} bytes (max {max_size})")

    suffix = file_path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise InputFileError(
            f"unsupported file extension: {suffix or '(none)'} (expected .yaml, .yml, or .json)"
        )


def detect_openapi_version(data: object) -> str:
    """Return the ``openapi`` version of a parsed document.

    Raises DocumentError for anything that is not an OpenAPI 3 document,
    including Swagger 2.0.
    """
    if not isinstance(data, dict):
        raise DocumentError("document is not a YAML/JSON mapping")
    if "swagger" in data:
        raise DocumentError(
            f"Swagger {data['swagger']} documents are not supported; convert to OpenAPI 3 first"
        )
    if "openapi" not in data:
        raise DocumentError("document has no 'openapi' version field")
    return str(data["openapi"])


def is_http_method(value: str) -> bool:
    """True if ``value`` names an HTTP method, in any letter case."""
    return value.upper() in HTTP_METHODS


def validate_method(path_item: PathItem, method: str, path: str = "") -> None:
    """Raise MethodNotFoundError unless ``method`` is defined on the path item."""
    if method in path_item.operations:
        return
    available = [m for m in HTTP_METHODS if m in path_item.operations]
    raise MethodNotFoundError(method, path, available)
