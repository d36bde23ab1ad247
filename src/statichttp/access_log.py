"""
=============================================================================
ACCESS LOG
=============================================================================

One line per exchange, in the style of the Apache combined log:

    127.0.0.1 - - [19/Oct/2026:12:00:00 +0000] "GET /index.html HTTP/1.1" 200 2 0.41ms

Written to the "statichttp.access" logger so it can be routed separately:

    logging.getLogger("statichttp.access").addHandler(file_handler)

=============================================================================
"""

from dataclasses import dataclass
import logging
import time


logger = logging.getLogger("statichttp.access")


@dataclass
class RequestLog:
    """
    Access log entry.

    Attributes:
        connection_id:  Connection.id, ties the entry to DEBUG lines.
        client_ip:      Peer address.
        request_line:   "METHOD url version" as received, "-" for gaps.
        status_code:    Status sent.
        content_length: Body bytes sent.
        duration_ms:    Time from accept to response sent.
        timestamp:      Local time of the entry.
    """

    connection_id: str
    client_ip: str
    request_line: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = time.strftime("%d/%b/%Y:%H:%M:%S %z")

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.request_line}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_request(entry: RequestLog):
    """Emit an entry at INFO."""
    logger.info(entry.to_text())
