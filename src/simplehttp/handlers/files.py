"""
=============================================================================
FILE HANDLER
=============================================================================

The single entry point the serving loop calls: raw request bytes in,
response bytes out.

=============================================================================
FLOW
=============================================================================

    raw bytes (one recv())
          │
          ▼
    RequestParser.parse()        VersionError ──► propagates
          │
          ▼
    ResponseBuilder.build()      OSError ──► propagates
          │
          ▼
    HTTPResponse.to_bytes()
          │
          ▼
    bytes for sendall()  (b"" when the target does not exist)

Errors are NOT turned into error responses here. The caller decides what
a failed request means for the connection; HTTPServer closes it without
writing anything.

=============================================================================
"""

import logging
import os
from typing import Union

from ..http.request import HTTPRequest, RequestParser
from ..http.response import HTTPResponse, ResponseBuilder


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Serves files and directory listings from a root directory.

    Usage:
        handler = FileHandler("/srv/www")
        data = handler.handle(b"GET /readme.txt HTTP/1.1\\r\\n\\r\\n")
    """

    def __init__(
        self,
        root: Union[str, os.PathLike],
        legacy_line_endings: bool = False,
    ):
        """
        Args:
            root: Directory to serve from.
            legacy_line_endings: Serialize headers with bare "\\n" joins.
        """
        self.parser = RequestParser()
        self.builder = ResponseBuilder(root)
        self.legacy_line_endings = legacy_line_endings

    @property
    def root(self):
        return self.builder.root

    def respond(self, data: Union[bytes, str]) -> tuple[HTTPRequest, HTTPResponse]:
        """
        Parse a request and build its response without serializing.

        Raises:
            VersionError: Unknown protocol version.
            OSError: Filesystem failure while resolving or reading.
        """
        request = self.parser.parse(data)
        response = self.builder.build(request)
        logger.debug(f"{response!r}")
        return request, response

    def handle(self, data: Union[bytes, str]) -> bytes:
        """
        Produce the bytes to write back for a raw request.

        Raises:
            VersionError: Unknown protocol version.
            OSError: Filesystem failure while resolving or reading.
        """
        _, response = self.respond(data)
        return response.to_bytes(self.legacy_line_endings)
