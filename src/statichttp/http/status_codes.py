"""
=============================================================================
HTTP STATUS CODES AND REASON PHRASES
=============================================================================

Status codes the server can emit, with their reason phrases.

=============================================================================
HOW THE SERVER USES STATUS CODES
=============================================================================

Every exchange ends in exactly one status code. The code decides two things
on the wire:

    ┌────────────────────────────────────────────────────────────────────┐
    │                  STATUS CODE → RESPONSE SHAPE                      │
    ├────────┬───────────────────────────────────────────────────────────┤
    │  2xx   │ Body is the file bytes or the directory listing           │
    │  3xx   │ Content-Type as resolved (never produced today)           │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ Body is the rendered error template, always text/html     │
    │  5xx   │                                                           │
    │ other  │                                                           │
    └────────┴───────────────────────────────────────────────────────────┘

    Codes this server actually produces:

        200 OK                         file or directory listing served
        400 Bad Request                malformed url / request object
        403 Forbidden                  path escapes root, listing disabled
        404 Not Found                  missing file or directory
        405 Method Not Allowed         method other than GET/POST
        415 Unsupported Media Type     unknown file extension
        500 Internal Server Error      unexpected failure in a worker
        503 Service Unavailable        worker pool queue is full
        505 HTTP Version Not Supported version token not "HTTP/..."

=============================================================================
THE REASON-PHRASE TABLE
=============================================================================

REASON_PHRASES is built once at import time and wrapped in a
MappingProxyType, so it is read-only for every worker thread:

    >>> REASON_PHRASES[404]
    'Not Found'
    >>> REASON_PHRASES[404] = "Gone"
    TypeError: 'mappingproxy' object does not support item assignment

A code that is not in the table is not an error: to_reason_phrase()
returns UNKNOWN_REASON_PHRASE so the status line can still be written.

=============================================================================
"""

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping


class HTTPStatus(IntEnum):
    """
    HTTP status codes known to the server.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # =========================================================================
    # 1xx INFORMATIONAL
    # =========================================================================
    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101

    # =========================================================================
    # 2xx SUCCESS
    # =========================================================================
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFORMATION = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206

    # =========================================================================
    # 3xx REDIRECTION
    # =========================================================================
    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    USE_PROXY = 305
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    # =========================================================================
    # 4xx CLIENT ERRORS
    # =========================================================================
    BAD_REQUEST = 400                   # Malformed url / request object
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403                     # Outside document root, listing off
    NOT_FOUND = 404                     # File or directory missing
    METHOD_NOT_ALLOWED = 405            # Method other than GET/POST
    NOT_ACCEPTABLE = 406
    PROXY_AUTHENTICATION_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PRECONDITION_FAILED = 412
    PAYLOAD_TOO_LARGE = 413
    URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415        # Unknown file extension
    RANGE_NOT_SATISFIABLE = 416
    EXPECTATION_FAILED = 417

    # =========================================================================
    # 5xx SERVER ERRORS
    # =========================================================================
    INTERNAL_SERVER_ERROR = 500         # Unexpected failure in a worker
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503           # Worker pool saturated
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505    # Version token not "HTTP/..."

    @property
    def phrase(self) -> str:
        """Reason phrase for this status code."""
        return to_reason_phrase(self)

    @property
    def is_success(self) -> bool:
        """2xx or 3xx: the resolved content is sent as-is."""
        return is_success(self)

    @property
    def is_error(self) -> bool:
        """Anything else: the error template is rendered instead."""
        return not is_success(self)


# =============================================================================
# REASON PHRASES
# =============================================================================
#
#   HTTP/1.1 404 Not Found
#            ─── ─────────
#             │      │
#             │      └── Reason phrase (from this table)
#             └───────── Status code
#
# =============================================================================

REASON_PHRASES: Mapping[int, str] = MappingProxyType({
    # 1xx Informational
    100: "Continue",
    101: "Switching Protocols",

    # 2xx Success
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",

    # 3xx Redirection
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",

    # 4xx Client Errors
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Payload Too Large",
    414: "URI Too Long",
    415: "Unsupported Media Type",
    416: "Range Not Satisfiable",
    417: "Expectation Failed",

    # 5xx Server Errors
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
})

# Phrase used for codes missing from REASON_PHRASES
UNKNOWN_REASON_PHRASE = "Unknown Status"


# =============================================================================
# USER-FACING MESSAGES
# =============================================================================
#
# Substituted into the {%message%} placeholder of the error template.
# 405 and 501 share a message: both mean "use GET".
#
# =============================================================================

STATUS_MESSAGES: Mapping[int, str] = MappingProxyType({
    400: "Please check the request format.",
    403: "Directory listing is not allowed.",
    404: "The requested file or directory cannot be found.",
    405: "GET is currently the only supported method.",
    415: "The requested file format is currently not supported.",
    500: "The server is experiencing some unknown errors.",
    501: "GET is currently the only supported method.",
    503: "The server is currently busy. Please try again later.",
    505: "The requested HTTP version is not supported. Please consider using HTTP/1.1.",
})

DEFAULT_STATUS_MESSAGE = "No message available."


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def to_reason_phrase(status_code: int) -> str:
    """
    Get the reason phrase for a status code.

    Never raises: unmapped codes return UNKNOWN_REASON_PHRASE.

    Examples:
        >>> to_reason_phrase(415)
        'Unsupported Media Type'

        >>> to_reason_phrase(299)
        'Unknown Status'
    """
    return REASON_PHRASES.get(int(status_code), UNKNOWN_REASON_PHRASE)


def to_message(status_code: int) -> str:
    """Human-readable explanation for the error page."""
    return STATUS_MESSAGES.get(int(status_code), DEFAULT_STATUS_MESSAGE)


def is_success(status_code: int) -> bool:
    """
    True for codes in [200, 400).

    Responses outside this range are always rendered from the error
    template as text/html.
    """
    return 200 <= status_code < 400
