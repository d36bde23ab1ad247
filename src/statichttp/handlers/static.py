"""
=============================================================================
STATIC FILE RESOLVER
=============================================================================

Maps a parsed request onto the document root and decides what to send back:
file content, a directory listing, or an error status.

=============================================================================
RESOLUTION STEPS
=============================================================================

Each step can end resolution early. The first one that fails decides the
status code:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  request.status >= 400 ─────────────────────────► that status        │
    │        │                                                             │
    │        ▼                                                             │
    │  last url segment empty ────────────────────────► 400                │
    │        │                                                             │
    │        ▼                                                             │
    │  extension not in CONTENT_TYPES ────────────────► 415                │
    │        │                                                             │
    │        ▼                                                             │
    │  path leaves the document root ─────────────────► 403                │
    │        │                                                             │
    │        ▼                                                             │
    │  no extension (directory)?                                           │
    │     ├── not a directory ────────────────────────► 404                │
    │     ├── no index.html ──────────────────────────► 200 listing        │
    │     │                                  (403 if listing disabled)     │
    │     └── has index.html ── continue with <dir>/index.html             │
    │        │                                                             │
    │        ▼                                                             │
    │  read file ── fails ────────────────────────────► 404                │
    │        │                                                             │
    │        ▼                                                             │
    │       200 with the file bytes                                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A request for exactly "/" arrives here as "/index.html". When the root has
no index.html, the root directory is listed instead of answering 404.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /../../etc/passwd HTTP/1.1

The url is percent-decoded, joined to the root and resolved (".." and
symlinks followed). Anything that does not end up inside the root gets
403 and a warning in the log; the filesystem is never read for it.

    candidate = (root_dir / relative).resolve()
    candidate.relative_to(root_dir)   # ValueError → outside the root

=============================================================================
"""

from pathlib import Path
from typing import List, NamedTuple, Optional, Union
from urllib.parse import unquote
import logging
import os

from ..http.mime_types import (
    HTML_TYPE,
    UNKNOWN_CONTENT_TYPE,
    is_directory_type,
    to_content_type,
)
from ..http.request import INDEX_FILE, HTTPRequest
from ..http.status_codes import HTTPStatus
from ..http.templates import DirectoryEntry, TemplateRenderer


logger = logging.getLogger(__name__)


class Resolution(NamedTuple):
    """
    Outcome of resolving one request.

    body is None for every error status; the response synthesizer renders
    the error page itself.
    """

    status_code: int
    content_type: str = ""
    body: Optional[bytes] = None


def list_directory(path: Path) -> List[DirectoryEntry]:
    """
    Read the children of a directory in listing order.

    Directories come first, then files; each group is sorted by code
    point. "." and ".." are never returned by os.scandir.

    Raises:
        OSError: The directory cannot be read.
    """
    directories = []
    files = []

    with os.scandir(path) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False
            (directories if is_dir else files).append(entry.name)

    return (
        [DirectoryEntry(name, is_dir=True) for name in sorted(directories)]
        + [DirectoryEntry(name) for name in sorted(files)]
    )


class StaticFileHandler:
    """
    Resolves requests against a document root.

    Args:
        root_dir: Directory files are served from. Must exist.
        templates: Renderer for directory listings. Defaults to one with
                   no template directory (inline fallback page).
        directory_listing: When False, directories without index.html
                           answer 403 instead of a listing.

    Raises:
        ValueError: root_dir is not a directory.

    Usage:
        handler = StaticFileHandler("./public", TemplateRenderer("./templates"))
        resolution = handler.resolve(parse_request(data))
    """

    def __init__(
        self,
        root_dir: Union[str, Path] = ".",
        templates: Optional[TemplateRenderer] = None,
        directory_listing: bool = True,
    ):
        self.root_dir = Path(root_dir).resolve()
        self.templates = templates if templates is not None else TemplateRenderer()
        self.directory_listing = directory_listing

        if not self.root_dir.is_dir():
            raise ValueError(f"Document root does not exist: {root_dir}")

    def resolve(self, request: HTTPRequest) -> Resolution:
        """
        Decide the status code, content type and body for a request.

        Never raises for a request-level problem: every failure is a
        status code. Paths the filesystem rejects (over-long names,
        symlink loops) answer 404 like any other unreadable file.
        """
        status = request.status
        if status >= 400:
            return Resolution(status)

        url = unquote(request.url)

        # ─────────────────────────────────────────────────────────────────
        # LAST SEGMENT AND CONTENT TYPE
        # ─────────────────────────────────────────────────────────────────
        segment = url[url.rfind("/") + 1:]
        if not segment or "\x00" in url:
            logger.warning(f"Unknown request object: {request.url!r}")
            return Resolution(HTTPStatus.BAD_REQUEST)

        content_type = to_content_type(segment)
        if content_type == UNKNOWN_CONTENT_TYPE:
            return Resolution(HTTPStatus.UNSUPPORTED_MEDIA_TYPE, content_type)

        # ─────────────────────────────────────────────────────────────────
        # CONTAINMENT
        # ─────────────────────────────────────────────────────────────────
        # resolve() raises OSError for over-long names and RuntimeError
        # (OSError on newer interpreters) for symlink loops
        try:
            path = self._to_filesystem_path(url)
        except (OSError, RuntimeError) as e:
            logger.debug(f"Cannot resolve {request.url!r}: {e}")
            return Resolution(HTTPStatus.NOT_FOUND, content_type)

        if path is None:
            logger.warning(f"Path traversal attempt: {request.url!r}")
            return Resolution(HTTPStatus.FORBIDDEN)

        # ─────────────────────────────────────────────────────────────────
        # DIRECTORIES
        # ─────────────────────────────────────────────────────────────────
        try:
            if is_directory_type(content_type):
                if not path.is_dir():
                    return Resolution(HTTPStatus.NOT_FOUND, content_type)

                index = path / INDEX_FILE
                if not index.is_file():
                    return self._listing(path, url)

                path = index
                content_type = HTML_TYPE

            elif request.is_root_index and not path.is_file():
                return self._listing(self.root_dir, "/")
        except OSError as e:
            logger.debug(f"Cannot stat {path}: {e}")
            return Resolution(HTTPStatus.NOT_FOUND, content_type)

        # ─────────────────────────────────────────────────────────────────
        # FILES
        # ─────────────────────────────────────────────────────────────────
        try:
            body = path.read_bytes()
        except OSError as e:
            logger.debug(f"Cannot read {path}: {e}")
            return Resolution(HTTPStatus.NOT_FOUND, content_type)

        return Resolution(HTTPStatus.OK, content_type, body)

    def _to_filesystem_path(self, url: str) -> Optional[Path]:
        """Map a decoded url to a path inside the root, or None if it escapes."""
        candidate = (self.root_dir / url.lstrip("/")).resolve()
        try:
            candidate.relative_to(self.root_dir)
        except ValueError:
            return None
        return candidate

    def _listing(self, path: Path, url: str) -> Resolution:
        """Render the listing for a directory that has no index.html."""
        if not self.directory_listing:
            return Resolution(HTTPStatus.FORBIDDEN)

        try:
            entries = list_directory(path)
        except OSError as e:
            logger.warning(f"Cannot list directory {path}: {e}")
            return Resolution(HTTPStatus.NOT_FOUND)

        html = self.templates.directory_listing(url, entries)
        return Resolution(HTTPStatus.OK, HTML_TYPE, html.encode("utf-8"))
