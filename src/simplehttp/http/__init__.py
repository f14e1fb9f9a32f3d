"""
=============================================================================
HTTP MESSAGE ENGINE
=============================================================================

Everything between "bytes arrived" and "bytes to send":

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   "GET /docs HTTP/1.1\r\nHost: x\r\n\r\n"                   │
    │ Output:  HTTPRequest(method=GET, resource=Resource("docs"), ...)    │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │ PATH GUARD (guard.py)                                               │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   "docs"                                                     │
    │ Output:  /srv/www/docs   (never outside the serving root)           │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE BUILDER (response.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   HTTPRequest + serving root                                 │
    │ Output:  HTTPResponse → to_bytes()                                  │
    │          file bytes / directory listing / 404                       │
    └─────────────────────────────────────────────────────────────────────┘

Content types of served files are sniffed from their bytes
(mime_types.py).

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    VersionError,
    Version,
    Method,
    Resource,
    parse_request,
    parse_version,
    classify_method,
    parse_resource,
    parse_headers,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ResponseStatus,
    AcceptRanges,
)
from .guard import PathGuard
from .mime_types import sniff_mime_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "VersionError",
    "Version",
    "Method",
    "Resource",
    "parse_request",
    "parse_version",
    "classify_method",
    "parse_resource",
    "parse_headers",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ResponseStatus",
    "AcceptRanges",

    # Filesystem
    "PathGuard",
    "sniff_mime_type",
]
