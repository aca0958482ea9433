"""Exceptions raised while locating and loading endpoint documentation.

Rendering itself never raises these; they come from the loader and the
input checks, and the CLI reports them to the user.
"""


class DocfinderError(Exception):
    """Base class for user-facing docfinder errors."""


class InputFileError(DocfinderError):
    """The input file is missing, too large, or has the wrong extension."""


class DocumentError(DocfinderError):
    """The file could not be read as an OpenAPI 3 document."""


class EndpointNotFoundError(DocfinderError):
    def __init__(self, path: str):
        super().__init__(f"endpoint not found: {path}")
        self.path = path


class MethodNotFoundError(DocfinderError):
    def __init__(self, method: str, path: str, available: list[str]):
        listed = ", ".join(available) if available else "none"
        super().__init__(
            f"method {method} is not defined for endpoint {path} (available: {listed})"
        )
        self.method = method
        self.path = path
        self.available = available
