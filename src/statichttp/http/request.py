"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes received on a connection into an HTTPRequest.

=============================================================================
WHAT WE READ
=============================================================================

Only the request line matters. Headers and body are ignored:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    GET /docs/guide.html HTTP/1.1\r\n      ◄── parsed                 │
    │    ─┬─ ───────┬──────── ────┬───                                     │
    │     │         │             │                                        │
    │   Method     URL         Version                                     │
    │                                                                      │
    │    Host: localhost:12345\r\n               ◄── ignored               │
    │    User-Agent: curl/8.0\r\n                ◄── ignored               │
    │    \r\n                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The three tokens are cut out in fixed order:

    method   = up to the first SP
    url      = up to the next SP
    version  = up to the next CRLF

=============================================================================
THE PARSER NEVER FAILS
=============================================================================

A truncated or malformed line does not raise. Parsing stops at the first
missing delimiter and the remaining fields keep their defaults:

    b"GET /index.html\r\n"   → method=GET, url="",  version=""
    b"BREW /pot HTTP/1.1\r\n" → method=UNDEFINED, url="/pot", ...
    b""                      → method=UNDEFINED, url="",  version=""

Whether the result is usable is decided afterwards by HTTPRequest.status,
a pure function of the three fields:

    ┌──────────────────────────────┬─────────────────────────────────────┐
    │ Check (in this order)        │ Status when it fails                │
    ├──────────────────────────────┼─────────────────────────────────────┤
    │ method is GET or POST        │ 405 Method Not Allowed              │
    │ url starts with "/"          │ 400 Bad Request                     │
    │ version starts with "HTTP/"  │ 505 HTTP Version Not Supported      │
    ├──────────────────────────────┼─────────────────────────────────────┤
    │ all passed                   │ 0  (go on to resource resolution)   │
    └──────────────────────────────┴─────────────────────────────────────┘

=============================================================================
URL NORMALIZATION
=============================================================================

    "/"           → "/index.html"     (index redirection)
    "/docs/"      → "/docs"           (trailing slashes stripped...)
    "/a/b///"     → "/a/b"            (...repeatedly)

So "/a/b//" and "/a/b" are the same request.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum

from .status_codes import HTTPStatus


SP = " "
CRLF = "\r\n"

INDEX_FILE = "index.html"


class HTTPMethod(Enum):
    """Request methods the server distinguishes."""

    UNDEFINED = "UNDEFINED"
    GET = "GET"
    POST = "POST"

    @classmethod
    def from_token(cls, token: str) -> "HTTPMethod":
        """
        Map a method token to an HTTPMethod, case-insensitively.

        Examples:
            >>> HTTPMethod.from_token("get")
            <HTTPMethod.GET: 'GET'>
            >>> HTTPMethod.from_token("DELETE")
            <HTTPMethod.UNDEFINED: 'UNDEFINED'>
        """
        try:
            return cls(token.strip().upper())
        except ValueError:
            return cls.UNDEFINED


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request line.

    Immutable: the parser builds it once and nobody changes it afterwards.
    The resolver works on its own copy of the url when it needs to rewrite
    it (index.html fallthrough).

    Attributes:
        method:  GET, POST or UNDEFINED.
        url:     Normalized absolute path ("/" already turned into
                 "/index.html", trailing slashes stripped).
        version: Version token as received, e.g. "HTTP/1.1".
        raw_url: The url token exactly as received, before normalization.
    """

    method: HTTPMethod = HTTPMethod.UNDEFINED
    url: str = ""
    version: str = ""
    raw_url: str = ""

    @property
    def status(self) -> int:
        """
        Validity classification of this request.

        Returns:
            0 for a well-formed request, otherwise the error status code
            that must be sent without touching the filesystem.
        """
        if self.method is HTTPMethod.UNDEFINED:
            return HTTPStatus.METHOD_NOT_ALLOWED
        if not self.url.startswith("/"):
            return HTTPStatus.BAD_REQUEST
        if not self.version.startswith("HTTP/"):
            return HTTPStatus.HTTP_VERSION_NOT_SUPPORTED
        return 0

    @property
    def is_valid(self) -> bool:
        """True when resource resolution may proceed."""
        return self.status < 400

    @property
    def is_root_index(self) -> bool:
        """True when the client asked for "/" and got "/index.html"."""
        return self.raw_url == "/"

    @property
    def request_line(self) -> str:
        """The request line as it is written to the access log."""
        return f"{self.method.value} {self.raw_url or '-'} {self.version or '-'}"

    def describe(self) -> str:
        """Multi-line dump used in DEBUG logs."""
        return (
            "HTTPRequest {"
            f"\n\tstatus: {self.status}"
            f"\n\tmethod: {self.method.value}"
            f"\n\turl: {self.url}"
            f"\n\tversion: {self.version}"
            "\n}"
        )


def normalize_url(url: str) -> str:
    """
    Apply index redirection and strip trailing slashes.

    Examples:
        >>> normalize_url("/")
        '/index.html'
        >>> normalize_url("/a/b///")
        '/a/b'
    """
    if url == "/":
        url = "/" + INDEX_FILE
    return url.rstrip("/")


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        Raw bytes
            │
            ▼
        decode (UTF-8, bad bytes replaced)
            │
            ▼
        method ── no SP? ──────────────► HTTPRequest()            (405)
            │
            ▼
        url ───── no SP? ──────────────► HTTPRequest(method)      (400)
            │
            ▼
        version ─ no CRLF? ────────────► HTTPRequest(method, url) (505)
            │
            ▼
        HTTPRequest(method, url, version)

    ==========================================================================
    """

    def parse(self, data: bytes) -> HTTPRequest:
        """
        Parse one receive buffer.

        Args:
            data: Bytes accumulated from the connection.

        Returns:
            HTTPRequest. Missing fields keep their defaults; check
            .status before using it.
        """
        message = data.decode("utf-8", errors="replace")

        # ─────────────────────────────────────────────────────────────────
        # METHOD: up to the first space
        # ─────────────────────────────────────────────────────────────────
        end = message.find(SP)
        if not message or end == -1:
            return HTTPRequest()

        method = HTTPMethod.from_token(message[:end])

        # ─────────────────────────────────────────────────────────────────
        # URL: up to the next space
        # ─────────────────────────────────────────────────────────────────
        start = end + 1
        end = message.find(SP, start)
        if start >= len(message) or end == -1:
            return HTTPRequest(method=method)

        raw_url = message[start:end]
        url = normalize_url(raw_url)

        # ─────────────────────────────────────────────────────────────────
        # VERSION: up to the end of the request line
        # ─────────────────────────────────────────────────────────────────
        start = end + 1
        end = message.find(CRLF, start)
        if start >= len(message) or end == -1:
            return HTTPRequest(method=method, url=url, raw_url=raw_url)

        version = message[start:end]

        return HTTPRequest(method=method, url=url, version=version, raw_url=raw_url)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(data: bytes) -> HTTPRequest:
    """Parse request bytes with a default RequestParser."""
    return RequestParser().parse(data)
