"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Decides what to send back for a parsed request and serializes it.

=============================================================================
FOUR OUTCOMES
=============================================================================

The guarded target path decides everything:

    ┌─────────────────────────┬────────┬───────────────┬──────────────────┐
    │ Target                  │ Status │ accept-ranges │ Body             │
    ├─────────────────────────┼────────┼───────────────┼──────────────────┤
    │ does not exist          │ 404    │ none          │ (nothing at all) │
    │ regular file            │ 200    │ bytes         │ file bytes       │
    │ directory               │ 200    │ none          │ HTML listing     │
    │ other (fifo, socket...) │ 404    │ none          │ 404 HTML page    │
    └─────────────────────────┴────────┴───────────────┴──────────────────┘

Note the asymmetry between the two 404 rows: a missing path produces an
EMPTY response (zero bytes on the wire), only a special file gets the
"404 NOT FOUND" page.

"accept-ranges: bytes" is advertised for files, but Range requests are
not implemented: the full file is always sent.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n                  ◄── version + status
    accept-ranges: bytes\r\n
    content-length: 5\r\n
    content-type: text/plain             ◄── files only
    \r\n\r\n                             ◄── blank line
    hello                                ◄── body

With legacy line endings the header lines are joined with a bare "\n"
instead of "\r\n"; the final "\r\n\r\n" is kept either way.

=============================================================================
"""

import html
import logging
import os
import string
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .guard import PathGuard
from .mime_types import sniff_mime_type
from .request import HTTPRequest, Version


logger = logging.getLogger(__name__)


class ResponseStatus(Enum):
    """
    The only two statuses this server ever produces.

    Internal errors do not become a 500: they abort the connection.
    """
    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        return "OK" if self is ResponseStatus.OK else "NOT FOUND"

    def __str__(self) -> str:
        return f"{self.value} {self.phrase}"


class AcceptRanges(Enum):
    """Value of the accept-ranges header line."""
    BYTES = "bytes"
    NONE = "none"

    def __str__(self) -> str:
        return f"accept-ranges: {self.value}"


# Bytes left literal in listing links
_ALPHANUMERIC = frozenset(string.ascii_letters + string.digits)


# =============================================================================
# FIXED PAGES
# =============================================================================

LISTING_PREAMBLE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body>
"""

LISTING_HEADING = '<h1>Currently in: {path}</h1><br><hr><a href="../">Go up</a>'

NOT_FOUND_PAGE = """
<!DOCTYPE html>
<html>
    <head>
        <meta charset="utf-8">
    </head>
    <body>
        <h1>404 NOT FOUND</h1>
    </body>
</html>"""


@dataclass(frozen=True)
class HTTPResponse:
    """
    A fully decided HTTP response.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        version:         Always Version.V1_1 on the status line

        status:          ResponseStatus.OK or ResponseStatus.NOT_FOUND

        content_length:  Byte length of body

        accept_ranges:   AcceptRanges.BYTES for files, NONE otherwise

        content_type:    Sniffed MIME type (files only, else None)

        body:            Payload bytes (file, listing or 404 page)

        current_path:    The request's resource path, echoed back

    =========================================================================
    """

    version: Version = Version.V1_1
    status: ResponseStatus = ResponseStatus.NOT_FOUND
    content_length: int = 0
    accept_ranges: AcceptRanges = AcceptRanges.NONE
    content_type: Optional[str] = None
    body: bytes = b""
    current_path: str = ""

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 200 OK" """
        return f"{self.version} {self.status}"

    @property
    def is_empty(self) -> bool:
        """
        True for the "target does not exist" outcome.

        Such a response has nothing to say: it serializes to zero bytes.
        """
        return self.status is ResponseStatus.NOT_FOUND and not self.body

    def to_bytes(self, legacy_line_endings: bool = False) -> bytes:
        """
        Serialize the response for socket.sendall().

        Args:
            legacy_line_endings: Join header lines with "\\n" instead of
                                 "\\r\\n".

        Returns:
            Header block + body, or b"" for an empty response.
        """
        if self.is_empty:
            return b""

        lines = [
            self.status_line,
            str(self.accept_ranges),
            f"content-length: {self.content_length}",
        ]
        if self.content_type:
            lines.append(f"content-type: {self.content_type}")

        newline = "\n" if legacy_line_endings else "\r\n"
        head = newline.join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + self.body


class ResponseBuilder:
    """
    Builds the HTTPResponse for a request against a serving root.

    ==========================================================================
    FLOW
    ==========================================================================

        HTTPRequest
              │
              ▼
        PathGuard.resolve(request.path)      ◄── never leaves the root
              │
              ▼
        ┌──────────────────────────────┐
        │ exists?   no  → empty 404    │
        │ is_file?  yes → _file()      │
        │ is_dir?   yes → _listing()   │
        │ otherwise     → 404 page     │
        └──────────────────────────────┘
              │
              ▼
        HTTPResponse (frozen)

    ==========================================================================
    USAGE
    ==========================================================================

        builder = ResponseBuilder(root="/srv/www")
        response = builder.build(parse_request(raw))
        sock.sendall(response.to_bytes())

    ==========================================================================
    """

    def __init__(self, root: Union[str, os.PathLike]):
        """
        Args:
            root: Directory to serve from. Fixed for the builder's lifetime.
        """
        self.guard = PathGuard(root)

    @property
    def root(self) -> Path:
        return self.guard.root

    def build(self, request: HTTPRequest) -> HTTPResponse:
        """
        Decide the response for a request.

        Raises:
            OSError: The root cannot be canonicalized, or the target file
                     or directory cannot be read.
        """
        current_path = request.path
        target = self.guard.resolve(current_path)

        if not target.exists():
            logger.debug(f"Not found: {target}")
            return HTTPResponse(current_path=current_path)

        if target.is_file():
            return self._file(target, current_path)

        if target.is_dir():
            return self._listing(target, current_path)

        logger.debug(f"Not a file or directory: {target}")
        body = NOT_FOUND_PAGE.encode("utf-8")
        return HTTPResponse(
            status=ResponseStatus.NOT_FOUND,
            content_length=len(body),
            body=body,
            current_path=current_path,
        )

    def _file(self, path: Path, current_path: str) -> HTTPResponse:
        """Serve a regular file in full, with a sniffed content type."""
        content = path.read_bytes()
        return HTTPResponse(
            status=ResponseStatus.OK,
            content_length=len(content),
            accept_ranges=AcceptRanges.BYTES,
            content_type=sniff_mime_type(content),
            body=content,
            current_path=current_path,
        )

    def _listing(self, path: Path, current_path: str) -> HTTPResponse:
        """
        Generate the directory listing page.

        Entries appear in the order the filesystem returns them. Each link
        is the percent-encoded "<current path>/<entry name>", with every
        byte except ASCII letters and digits encoded (including "/"), so
        following it makes the server decode it back to the same path.
        """
        page = render_listing(path, current_path).encode("utf-8")
        return HTTPResponse(
            status=ResponseStatus.OK,
            content_length=len(page),
            body=page,
            current_path=current_path,
        )


def encode_href(text: str) -> str:
    """
    Percent-encode every byte that is not an ASCII letter or digit.

    Stricter than quote(safe=""), which leaves "._-~" alone:

        "subdir/a.txt"  →  "subdir%2Fa%2Etxt"

    Surrogate-escaped characters (from names that are not valid UTF-8)
    are encoded as the raw bytes they stand for.
    """
    return "".join(
        chr(byte) if chr(byte) in _ALPHANUMERIC else f"%{byte:02X}"
        for byte in os.fsencode(text)
    )


def render_listing(path: Path, current_path: str) -> str:
    """
    Render the HTML listing of a directory.

    Args:
        path: Directory to list.
        current_path: The request's decoded resource path, used for the
                      heading and as prefix of every link.

    Raises:
        OSError: The directory cannot be read.
    """
    parts = [LISTING_PREAMBLE]
    parts.append(LISTING_HEADING.format(path=html.escape(f"/{current_path}")))
    parts.append("<ul>")

    with os.scandir(path) as entries:
        for entry in entries:
            # Names that are not valid UTF-8 arrive surrogate-escaped
            name = entry.name
            readable = name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
            display_name = f"{readable}/" if entry.is_dir() else readable
            href = encode_href(f"{current_path}/{name}")
            parts.append(
                f'<li><a href="{href}">{html.escape(display_name)}</a></li>'
            )

    parts.append("</ul></body></html>")
    return "".join(parts)
