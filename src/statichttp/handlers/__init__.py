"""
Request handlers.

StaticFileHandler maps parsed requests onto a document root and returns a
Resolution (status code, content type, body) for the response synthesizer.
"""

from .static import Resolution, StaticFileHandler, list_directory

__all__ = [
    "Resolution",
    "StaticFileHandler",
    "list_directory",
]
