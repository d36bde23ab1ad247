"""
=============================================================================
CONTENT-TYPE DETECTION
=============================================================================

Maps the extension of the requested file name to the MIME type sent in the
Content-Type header.

=============================================================================
THREE POSSIBLE OUTCOMES
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │                  to_content_type(name)                             │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  "style.css"   → "text/css"          extension known               │
    │                                                                     │
    │  "docs"        → DIRECTORY_TYPE      no extension: the resolver    │
    │  "archive."                          treats the name as a          │
    │                                      directory, NOT as an error    │
    │                                                                     │
    │  "data.xyz"    → UNKNOWN_CONTENT_TYPE  extension not in the table: │
    │                                        the resolver answers 415    │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

Neither marker is a usable Content-Type value:
is_valid_content_type() tells them apart from real MIME strings, and the
response serializer falls back to text/html whenever it sees one.

=============================================================================
CASE SENSITIVITY
=============================================================================

Keys are lowercase extensions without the dot. Lookups are exact, so
"PHOTO.JPG" is an unsupported type. Files are served under the names they
actually have on disk; no guessing.

=============================================================================
"""

from types import MappingProxyType
from typing import Mapping


# =============================================================================
# CONTENT-TYPE TABLE
# =============================================================================
#
# Extension (lowercase, no dot) → MIME type.
# Read-only after import: every worker thread shares this object.
#
# =============================================================================

CONTENT_TYPES: Mapping[str, str] = MappingProxyType({
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "csv": "text/csv",
    "js": "text/javascript",
    "mjs": "text/javascript",
    "txt": "text/plain",
    "md": "text/markdown",

    # -------------------------------------------------------------------------
    # STRUCTURED DATA
    # -------------------------------------------------------------------------
    "json": "application/json",
    "xml": "application/xml",
    "xhtml": "application/xhtml+xml",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    "bmp": "image/bmp",
    "gif": "image/gif",
    "ico": "image/vnd.microsoft.icon",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "svg": "image/svg+xml",
    "webp": "image/webp",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO
    # -------------------------------------------------------------------------
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "weba": "audio/webm",
    "mp4": "video/mp4",
    "mpeg": "video/mpeg",
    "webm": "video/webm",

    # -------------------------------------------------------------------------
    # FONTS
    # -------------------------------------------------------------------------
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "otf": "font/otf",

    # -------------------------------------------------------------------------
    # DOCUMENTS
    # -------------------------------------------------------------------------
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",

    # -------------------------------------------------------------------------
    # ARCHIVES
    # -------------------------------------------------------------------------
    "7z": "application/x-7z-compressed",
    "gz": "application/gzip",
    "rar": "application/vnd.rar",
    "tar": "application/x-tar",
    "zip": "application/zip",

    # -------------------------------------------------------------------------
    # SCRIPTS AND BINARIES
    # -------------------------------------------------------------------------
    # Served as downloads, never executed
    #
    "php": "application/x-httpd-php",
    "sh": "application/x-sh",
    "wasm": "application/wasm",
})

# Synthetic type for a name without extension: "this is a directory"
DIRECTORY_TYPE = "text/directory"

# Marker for an extension missing from CONTENT_TYPES
UNKNOWN_CONTENT_TYPE = "Error: Unknown content type"

# Sent for every error page and directory listing
HTML_TYPE = "text/html"


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def get_extension(name: str) -> str:
    """
    Return the text after the last dot of a file name.

    Returns an empty string when there is no dot or the dot is the last
    character ("archive.").

    Examples:
        >>> get_extension("index.html")
        'html'
        >>> get_extension("bundle.min.js")
        'js'
        >>> get_extension("docs")
        ''
    """
    pos = name.rfind(".")
    if pos == -1 or pos + 1 >= len(name):
        return ""
    return name[pos + 1:]


def to_content_type(name: str) -> str:
    """
    Map a file name (the last url segment) to its content type.

    Pure function of its argument: no filesystem access.

    Args:
        name: File name such as "logo.png".

    Returns:
        The MIME type, DIRECTORY_TYPE when the name has no extension, or
        UNKNOWN_CONTENT_TYPE when the extension is not registered.

    Examples:
        >>> to_content_type("logo.png")
        'image/png'
        >>> to_content_type("assets")
        'text/directory'
        >>> to_content_type("data.xyz")
        'Error: Unknown content type'
    """
    extension = get_extension(name)
    if not extension:
        return DIRECTORY_TYPE
    return CONTENT_TYPES.get(extension, UNKNOWN_CONTENT_TYPE)


def is_directory_type(content_type: str) -> bool:
    """True for the synthetic directory marker."""
    return content_type == DIRECTORY_TYPE


def is_valid_content_type(content_type: str) -> bool:
    """
    Check whether a value can go into a Content-Type header.

    Empty strings and both markers are rejected.
    """
    if not content_type:
        return False
    if content_type.startswith("Error"):
        return False
    return not is_directory_type(content_type)
