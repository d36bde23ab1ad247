"""
=============================================================================
HTML TEMPLATES
=============================================================================

Renders the two HTML pages the server generates itself: the error page and
the directory listing.

=============================================================================
TEMPLATE FILES
=============================================================================

Both pages come from plain HTML files with {%name%} placeholders:

    templates/
    ├── error.html     {%status_code%}  {%reason_phrase%}  {%message%}
    └── dirlist.html   {%path%}         {%list%}

Every occurrence of a placeholder is replaced. The files are read on each
render, so they can be edited while the server runs.

=============================================================================
MISSING TEMPLATES ARE NOT FATAL
=============================================================================

If a template cannot be read, a warning is logged and a minimal inline
page is used instead:

    error.html missing    →  <h1>404 Not Found</h1>
    dirlist.html missing  →  <h1>Index of /docs/</h1><ul>...</ul>

A broken template never turns into a failed connection.

=============================================================================
"""

from dataclasses import dataclass
from html import escape
from pathlib import Path
from typing import Iterable, Optional, Union
from urllib.parse import quote
import logging

from .status_codes import to_message, to_reason_phrase


logger = logging.getLogger(__name__)

ERROR_TEMPLATE = "error.html"
LISTING_TEMPLATE = "dirlist.html"


@dataclass(frozen=True)
class DirectoryEntry:
    """One child of a listed directory."""

    name: str
    is_dir: bool = False

    @property
    def display_name(self) -> str:
        """Name with a trailing "/" for directories."""
        return self.name + "/" if self.is_dir else self.name


def render_entry(entry: DirectoryEntry) -> str:
    """
    Render one <li> line of a directory listing.

        >>> render_entry(DirectoryEntry("css", is_dir=True))
        '<li><a href="css/">css/</a></li>'
    """
    href = quote(entry.display_name)
    text = escape(entry.display_name)
    return f'<li><a href="{href}">{text}</a></li>'


def render_entries(entries: Iterable[DirectoryEntry]) -> str:
    """Render entries in the order given, one per line."""
    return "".join("\n" + render_entry(entry) for entry in entries)


def normalize_listing_path(path: str) -> str:
    """
    Turn a directory path into the heading shown on the listing page.

    Examples:
        >>> normalize_listing_path("./docs")
        '/docs/'
        >>> normalize_listing_path(".")
        '/'
    """
    if path.startswith("."):
        path = path[1:]
    if not path.endswith("/"):
        path += "/"
    return path


def substitute(template: str, values: dict) -> str:
    """
    Replace every {%key%} placeholder in template.

    Placeholders missing from the template are logged; the rest of the
    substitution still happens.
    """
    for key, value in values.items():
        placeholder = "{%" + key + "%}"
        if placeholder not in template:
            logger.warning(f"Template placeholder {placeholder} not found")
            continue
        template = template.replace(placeholder, value)
    return template


class TemplateRenderer:
    """
    Renders error pages and directory listings from a template directory.

    Args:
        template_dir: Directory holding error.html and dirlist.html.
                      None means "no templates": every page uses the
                      inline fallback.

    Usage:
        renderer = TemplateRenderer("./templates")
        html = renderer.error_page(404)
        html = renderer.directory_listing("/docs", entries)
    """

    def __init__(self, template_dir: Optional[Union[str, Path]] = None):
        self.template_dir = Path(template_dir) if template_dir is not None else None

    def _load(self, name: str) -> Optional[str]:
        """Read a template file, or None when it is unavailable."""
        if self.template_dir is None:
            return None

        path = self.template_dir / name
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Template {path} unavailable, using fallback: {e}")
            return None

    def error_page(self, status_code: int) -> str:
        """
        Render the error page for a status code.

        Args:
            status_code: Any integer; unknown codes render with the
                         fallback phrase and the default message.

        Returns:
            Complete HTML document.
        """
        phrase = to_reason_phrase(status_code)
        template = self._load(ERROR_TEMPLATE)

        if template is None:
            return f"<h1>{int(status_code)} {phrase}</h1>"

        return substitute(template, {
            "status_code": str(int(status_code)),
            "reason_phrase": phrase,
            "message": to_message(status_code),
        })

    def directory_listing(self, path: str, entries: Iterable[DirectoryEntry]) -> str:
        """
        Render the listing page for a directory.

        Args:
            path: Directory path relative to the document root, either
                  url style ("/docs") or filesystem style ("./docs").
            entries: Children in display order.

        Returns:
            Complete HTML document.
        """
        heading = normalize_listing_path(path)
        items = render_entries(entries)
        template = self._load(LISTING_TEMPLATE)

        if template is None:
            return f"<h1>Index of {escape(heading)}</h1>\n<ul>{items}\n</ul>"

        return substitute(template, {
            "path": escape(heading),
            "list": items,
        })
