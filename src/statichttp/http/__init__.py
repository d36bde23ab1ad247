"""
=============================================================================
HTTP MESSAGE LAYER
=============================================================================

Everything between raw bytes and raw bytes, with no sockets involved:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       bytes → HTTPRequest (method, url, version, status) │
    │ status_codes.py  status code → reason phrase, error-page message    │
    │ mime_types.py    file name → Content-Type (or a marker)             │
    │ templates.py     error page and directory listing HTML              │
    │ response.py      HTTPResponse → status line, 3 headers, body        │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .mime_types import CONTENT_TYPES, DIRECTORY_TYPE, UNKNOWN_CONTENT_TYPE, to_content_type
from .request import HTTPMethod, HTTPRequest, RequestParser, parse_request
from .response import HTTPResponse, format_http_date
from .status_codes import HTTPStatus, REASON_PHRASES, to_message, to_reason_phrase
from .templates import DirectoryEntry, TemplateRenderer

__all__ = [
    # Request parsing
    "HTTPMethod",
    "HTTPRequest",
    "RequestParser",
    "parse_request",

    # Response synthesis
    "HTTPResponse",
    "format_http_date",
    "TemplateRenderer",
    "DirectoryEntry",

    # Status codes
    "HTTPStatus",
    "REASON_PHRASES",
    "to_reason_phrase",
    "to_message",

    # Content types
    "CONTENT_TYPES",
    "DIRECTORY_TYPE",
    "UNKNOWN_CONTENT_TYPE",
    "to_content_type",
]
