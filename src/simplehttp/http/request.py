"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw text of an HTTP request into an immutable HTTPRequest value.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    GET /docs/read%20me.txt HTTP/1.1\r\n      ◄── REQUEST LINE       │
    │    ─┬─ ─────────┬───────── ────┬───                                 │
    │     │           │              │                                     │
    │   Method     Resource       Version                                  │
    │                                                                      │
    │    Host: localhost:5500\r\n                   ◄── HEADERS            │
    │    User-Agent: curl/8.0\r\n                                          │
    │    \r\n                                       ◄── BLANK LINE         │
    │    ...                                        ◄── BODY               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FOUR SMALL PARSERS, ONE ASSEMBLER
=============================================================================

Each piece of the request is extracted by its own function, all of them
working on the SAME raw text:

    classify_method()   "GET" / "POST" / anything else
    parse_resource()    decoded path, or None
    parse_version()     HTTP/1.1 or HTTP/2, or VersionError
    parse_headers()     {name: value}, or None

RequestParser.parse() runs all four. Only the version is strict:

    ┌───────────────────┬────────────────────────────────────────────────┐
    │ Sub-parser        │ On failure                                      │
    ├───────────────────┼────────────────────────────────────────────────┤
    │ parse_version     │ VersionError is raised, request is rejected     │
    │ parse_resource    │ Resource("") is substituted                     │
    │ parse_headers     │ {} is substituted                               │
    │ classify_method   │ never fails (UNCLASSIFIED)                      │
    └───────────────────┴────────────────────────────────────────────────┘

Lenient clients that send a bare request line or odd header lines still
get an answer; a request in an unknown protocol does not.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Union
from urllib.parse import unquote
import logging


logger = logging.getLogger(__name__)

# Line terminator and header/body separator
CRLF = "\r\n"
BLANK_LINE = "\r\n\r\n"


class HTTPParseError(Exception):
    """
    Raised when an HTTP request cannot be parsed.

    Carries the HTTP status code that best describes the failure, even
    though this server never sends error statuses back: a failed parse
    aborts the connection without writing a response.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class VersionError(HTTPParseError):
    """
    The request line does not name a protocol version we understand.

    The message embeds the offending input to help diagnose broken clients.
    """

    def __init__(self, request: str):
        super().__init__(
            f"Unknown protocol version in {request}",
            status_code=505  # HTTP Version Not Supported
        )
        self.request = request


# =============================================================================
# VERSION
# =============================================================================

class Version(Enum):
    """
    Protocol versions recognized on the request line.

    HTTP/2 is only a label here: no HTTP/2 framing is implemented, the
    server answers every request as HTTP/1.1.
    """
    V1_1 = "HTTP/1.1"
    V2_0 = "HTTP/2"

    def __str__(self) -> str:
        return self.value


# Token separators on the request line
_ASCII_WHITESPACE = re.compile(r"[ \t\n\x0c\r]+")

# Accepted request-line tokens → Version
_VERSION_TOKENS = {
    "HTTP/1.1": Version.V1_1,
    "HTTP/2": Version.V2_0,
    "HTTP/2.0": Version.V2_0,
}


def parse_version(request: str) -> Version:
    """
    Find the protocol version on the request line.

    The request line is split on ASCII whitespace (space, \\t, \\n, \\f, \\r;
    not "\\xa0" or other Unicode spaces) and the FIRST token that is
    a known version wins, wherever it appears on the line:

        "GET / HTTP/1.1\\r\\n..."   → Version.V1_1
        "GET / HTTP/2.0\\r\\n..."   → Version.V2_0
        "GET / HTTP/1.0\\r\\n..."   → VersionError
        "GET / HTTP/1.1"            → VersionError  (no request line terminator)

    Args:
        request: The full raw request text.

    Returns:
        The matching Version.

    Raises:
        VersionError: No request line, or no recognized version token.
    """
    request_line, sep, _ = request.partition(CRLF)
    if sep:
        for token in _ASCII_WHITESPACE.split(request_line):
            version = _VERSION_TOKENS.get(token)
            if version is not None:
                return version
    raise VersionError(request)


# =============================================================================
# METHOD
# =============================================================================

class Method(Enum):
    """
    Closed set of request methods.

    UNCLASSIFIED is a normal value, not an error. It tells the resource
    resolver not to look for a path.
    """
    GET = "GET"
    POST = "POST"
    UNCLASSIFIED = "UNCLASSIFIED"

    @classmethod
    def identify(cls, token: str) -> "Method":
        """Classify a bare method token (case-sensitive)."""
        if token == "GET":
            return cls.GET
        if token == "POST":
            return cls.POST
        return cls.UNCLASSIFIED

    def __str__(self) -> str:
        return self.value


def classify_method(request: str) -> Method:
    """
    Classify the verb at the start of the request line.

    Anything we cannot read a method token from (no line terminator, no
    space on the line) is UNCLASSIFIED.
    """
    request_line, sep, _ = request.partition(CRLF)
    if not sep:
        return Method.UNCLASSIFIED
    method, space, _ = request_line.partition(" ")
    if not space:
        return Method.UNCLASSIFIED
    return Method.identify(method)


# =============================================================================
# RESOURCE
# =============================================================================

@dataclass(frozen=True)
class Resource:
    """
    The requested path, percent-decoded, without leading "/" separators.

        "/docs/read%20me.txt"  →  Resource(path="docs/read me.txt")
        "/"                    →  Resource(path="")
    """
    path: str = ""


def parse_resource(request: str) -> Optional[Resource]:
    """
    Extract the resource path from the request line.

    =====================================================================
    EXTRACTION STEPS
    =====================================================================

        "GET /a%20b.txt HTTP/1.1"
         │
         ├── split at first space  → "GET" | "/a%20b.txt HTTP/1.1"
         ├── classify "GET"        → Method.GET (else: None)
         ├── split at next space   → "/a%20b.txt" | "HTTP/1.1"
         ├── trim + percent-decode → "/a b.txt"
         └── strip leading "/"     → "a b.txt"

    =====================================================================

    Percent-decoding uses unquote(), not unquote_plus(): a "+" in a path
    is a literal plus sign, not a space.

    Returns:
        The Resource, or None when the method is not GET/POST or a
        delimiter is missing.
    """
    request_line, sep, _ = request.partition(CRLF)
    if not sep:
        return None

    method, space, rest = request_line.partition(" ")
    if not space:
        return None

    if Method.identify(method) is Method.UNCLASSIFIED:
        return None

    target, space, _version = rest.partition(" ")
    if not space:
        return None

    decoded = unquote(target.strip())
    return Resource(path=decoded.lstrip("/"))


# =============================================================================
# HEADERS
# =============================================================================

def parse_headers(request: str) -> Optional[Dict[str, str]]:
    """
    Parse the header block into a dictionary.

    Unlike most HTTP libraries, header names keep the case they were sent
    with ("Host" and "host" are different keys), and a repeated header
    simply overwrites the earlier value.

    Lines are split on CRLF and parsing stops at the first empty line. A
    line without a colon makes the WHOLE block
    unparseable: None is returned instead of a partial dictionary.

    Args:
        request: The full raw request text.

    Returns:
        Header name → value (both trimmed), or None.
    """
    _, sep, header_block = request.partition(CRLF)
    if not sep:
        return None

    headers: Dict[str, str] = {}

    lines = header_block.split(CRLF)
    if lines and not lines[-1]:
        lines.pop()  # Trailing CRLF is a terminator, not an empty line

    for line in lines:
        if not line:
            break

        name, colon, value = line.partition(":")
        if not colon:
            return None

        headers[name.strip()] = value.strip()

    return headers


# =============================================================================
# REQUEST
# =============================================================================

@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:    Method.GET, Method.POST or Method.UNCLASSIFIED

        resource:  Resource with the decoded, separator-stripped path.
                   Resource("") when the request line was unusable.

        version:   Version.V1_1 or Version.V2_0

        headers:   {name: value}, names case-sensitive as received.
                   {} when the header block was unusable.

        body:      Everything after the first blank line, as text.
                   Content-Length is NOT consulted.

    =========================================================================
    """

    method: Method
    resource: Resource
    version: Version
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def path(self) -> str:
        """The decoded resource path (no leading "/")."""
        return self.resource.path

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value by its exact name.

        Lookup is case-sensitive, matching how headers were stored.
        """
        return self.headers.get(name, default)


class RequestParser:
    """
    Assembles an HTTPRequest from raw request data.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        Raw bytes / text
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Decode bytes as UTF-8 (invalid sequences replaced)            │
        │  2. classify_method()                                             │
        │  3. parse_resource()   None → Resource("")   (logged)             │
        │  4. parse_version()    VersionError → propagate                   │
        │  5. parse_headers()    None → {}             (logged)             │
        │  6. body = text after first \r\n\r\n, or ""                       │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest (frozen)

    ==========================================================================
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def parse(self, data: Union[bytes, str]) -> HTTPRequest:
        """
        Parse a raw request.

        Args:
            data: Request bytes as read from the socket, or already
                  decoded text.

        Returns:
            The assembled HTTPRequest.

        Raises:
            VersionError: The request line has no recognized version.
        """
        if isinstance(data, bytes):
            text = data.decode(self.encoding, errors="replace")
        else:
            text = data

        method = classify_method(text)

        resource = parse_resource(text)
        if resource is None:
            logger.debug("No resource on request line, using empty path")
            resource = Resource()

        version = parse_version(text)

        headers = parse_headers(text)
        if headers is None:
            logger.debug("Malformed header block, using empty headers")
            headers = {}

        _, sep, body = text.partition(BLANK_LINE)

        return HTTPRequest(
            method=method,
            resource=resource,
            version=version,
            headers=headers,
            body=body if sep else "",
        )


def parse_request(data: Union[bytes, str]) -> HTTPRequest:
    """
    Convenience function: parse a request with a default RequestParser.
    """
    return RequestParser().parse(data)
