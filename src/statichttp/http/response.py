"""
=============================================================================
HTTP RESPONSE SYNTHESIS
=============================================================================

Turns a resolved request into the bytes written back to the client.

=============================================================================
WIRE FORMAT
=============================================================================

Every response has exactly this shape. No other headers are emitted:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                      ◄── status line          │
    │    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n                           │
    │    Content-Type: text/html\r\n                                       │
    │    Content-Length: 2\r\n                                             │
    │    \r\n                                     ◄── end of headers       │
    │    hi                                       ◄── body                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHERE THE BODY COMES FROM
=============================================================================

    status in [200, 400)  →  HTTPResponse.content as stored
                             (file bytes or rendered directory listing)

    anything else         →  rendered error template, text/html
                             (HTTPResponse.content is ignored)

The Content-Type header falls back to text/html whenever the status is an
error or the stored type is empty or one of the mime_types markers.

The status-line version echoes the request. A request that never got as far
as a usable "HTTP/..." token is answered as HTTP/1.1 so the client can still
read the reply.

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .mime_types import HTML_TYPE, is_valid_content_type
from .request import HTTPRequest
from .status_codes import HTTPStatus, is_success, to_reason_phrase
from .templates import TemplateRenderer


DEFAULT_VERSION = "HTTP/1.1"


@dataclass
class HTTPResponse:
    """
    A response ready to be serialized.

    Attributes:
        version:      Version token for the status line.
        status_code:  Final status code.
        content_type: Resolved MIME type, may be empty for error paths.
        content:      Body for success responses.
    """

    version: str = DEFAULT_VERSION
    status_code: int = HTTPStatus.OK
    content_type: str = ""
    content: bytes = b""

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_request(cls, request: HTTPRequest, handler) -> "HTTPResponse":
        """
        Resolve a parsed request and wrap the result.

        Args:
            request: Output of the request parser.
            handler: Object with a resolve(request) method returning a
                     Resolution (see handlers.static).

        Returns:
            HTTPResponse with a terminal status code.
        """
        resolution = handler.resolve(request)
        return cls(
            version=request.version,
            status_code=resolution.status_code,
            content_type=resolution.content_type,
            content=resolution.body or b"",
        )

    @classmethod
    def error(cls, status_code: int, version: str = DEFAULT_VERSION) -> "HTTPResponse":
        """Response for a failure detected outside the resolver (500, 503)."""
        return cls(version=version, status_code=status_code)

    # =========================================================================
    # DERIVED FIELDS
    # =========================================================================

    @property
    def is_success(self) -> bool:
        return is_success(self.status_code)

    @property
    def reason_phrase(self) -> str:
        return to_reason_phrase(self.status_code)

    @property
    def status_line(self) -> str:
        """
        Status line without the trailing CRLF.

        Example: "HTTP/1.1 404 Not Found"
        """
        version = self.version if self.version.startswith("HTTP/") else DEFAULT_VERSION
        return f"{version} {self.status_code} {self.reason_phrase}"

    @property
    def header_content_type(self) -> str:
        """Value written to the Content-Type header."""
        if not self.is_success or not is_valid_content_type(self.content_type):
            return HTML_TYPE
        return self.content_type

    def body(self, templates: Optional[TemplateRenderer] = None) -> bytes:
        """
        Bytes sent after the blank line.

        Args:
            templates: Renderer for the error page. None uses the inline
                       fallback page.
        """
        if self.is_success:
            return self.content

        renderer = templates if templates is not None else TemplateRenderer()
        return renderer.error_page(self.status_code).encode("utf-8")

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_bytes(
        self,
        templates: Optional[TemplateRenderer] = None,
        now: Optional[datetime] = None,
    ) -> bytes:
        """
        Serialize the response for socket.sendall().

        Args:
            templates: Renderer used for error pages.
            now: Timestamp for the Date header; defaults to the current
                 UTC time.

        Returns:
            Status line, the three headers, a blank line and the body.
        """
        body = self.body(templates)
        date = format_http_date(now or datetime.now(timezone.utc))

        head = (
            f"{self.status_line}\r\n"
            f"Date: {date}\r\n"
            f"Content-Type: {self.header_content_type}\r\n"
            f"Content-Length: {len(body)}\r\n"
            "\r\n"
        )
        return head.encode("utf-8") + body

    def describe(self) -> str:
        """Multi-line dump used in DEBUG logs."""
        return (
            "HTTPResponse {"
            f"\n\tversion: {self.version}"
            f"\n\tstatus_code: {self.status_code}"
            f"\n\treason_phrase: {self.reason_phrase}"
            f"\n\tcontent_type: {self.content_type}"
            f"\n\tcontent_length: {len(self.content)}"
            "\n}"
        )


# =============================================================================
# HELPERS
# =============================================================================

_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date.

    Built from fixed English name tables rather than strftime, so the
    output does not depend on the process locale.

        >>> format_http_date(datetime(2026, 10, 19, 8, 5, 3, tzinfo=timezone.utc))
        'Mon, 19 Oct 2026 08:05:03 GMT'
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
