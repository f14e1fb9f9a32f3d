"""
=============================================================================
SIMPLEHTTP - A MINIMAL HTTP FILE SERVER
=============================================================================

Serves files and directory listings from a root directory over HTTP/1.1.

=============================================================================
QUICK START
=============================================================================

    # From the command line, serving the current directory
    python -m simplehttp --port 5500

    # From code
    from simplehttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(root="/srv/www"))
    server.run()

    # Just the message engine, no sockets
    from simplehttp import FileHandler

    handler = FileHandler("/srv/www")
    handler.handle(b"GET /readme.txt HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")

=============================================================================
PACKAGE LAYOUT
=============================================================================

    simplehttp/
    ├── __init__.py          ◄── You are here
    ├── __main__.py          CLI entry point
    ├── config.py            ServerConfig
    ├── server.py            HTTPServer: accept → dispatch → handle
    ├── core/
    │   ├── socket_server.py Listening socket and accept loop
    │   ├── connection.py    One request/response per client socket
    │   └── thread_pool.py   Bounded worker pool
    ├── handlers/
    │   └── files.py         FileHandler: bytes in, bytes out
    └── http/
        ├── request.py       Request parsing
        ├── guard.py         Path traversal guard
        ├── response.py      Response decision and serialization
        └── mime_types.py    Content-Type sniffing

=============================================================================
"""

__version__ = "0.1.0"

from .config import ServerConfig
from .server import HTTPServer, create_server
from .handlers import FileHandler
from .http import (
    HTTPRequest,
    HTTPResponse,
    RequestParser,
    ResponseBuilder,
    HTTPParseError,
    VersionError,
    parse_request,
)

__all__ = [
    "__version__",
    "ServerConfig",
    "HTTPServer",
    "create_server",
    "FileHandler",
    "HTTPRequest",
    "HTTPResponse",
    "RequestParser",
    "ResponseBuilder",
    "HTTPParseError",
    "VersionError",
    "parse_request",
]
