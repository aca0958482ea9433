"""Markdown fragments and limits shared by the generators."""

HEADER_PARAMETERS = "### Parameters\n\n"
HEADER_REQUEST_BODY = "### Request Body\n\n"
HEADER_RESPONSES = "### Responses\n\n"
HEADER_SECURITY = "### Security\n\n"
HEADER_EXAMPLES = "\n**Examples:**\n\n"
HEADER_HEADERS = "**Headers:**\n\n"
HEADER_SCHEMA = "**Schema:**\n\n"

SEPARATOR_OPERATION = "---\n\n"
MARKER_REQUIRED = " **(required)**"
MARKER_DEPRECATED = " ⚠️ *deprecated*"
DEPRECATION_WARNING = (
    "⚠️ **DEPRECATED** - This operation is deprecated and may be removed "
    "in a future version.\n\n"
)
MAX_DEPTH_REACHED = "*(max depth reached)*"

# Deep or self-referencing schemas stop rendering after this many levels.
MAX_RECURSION_DEPTH = 20

# Operations on a path are always rendered in this order.
METHOD_ORDER = ("GET", "PUT", "POST", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE")
