"""
=============================================================================
HTTP FILE SERVER
=============================================================================

Ties the pieces together: SocketServer accepts, a dispatcher picks a
thread, FileHandler turns the request bytes into response bytes.

=============================================================================
REQUEST FLOW
=============================================================================

    SocketServer.accept()
          │
          ▼
    _handle_connection(conn)
          │
          ├── "pool"   ──► ThreadPool.submit(_process_connection)
          │                  (accept loop continues immediately)
          │
          └── "serial" ──► Thread(_process_connection).start(); .join()
                             (next accept() waits for this client)
          │
          ▼
    _process_connection(conn)          (worker thread)
          │
          ├── conn.read_request()      one recv()
          ├── FileHandler.respond()    parse + build
          ├── conn.send_response()     sendall(response.to_bytes())
          └── conn.close()

=============================================================================
WHAT HAPPENS ON ERRORS?
=============================================================================

    ┌────────────────────────────────┬───────────────────────────────────┐
    │ Failure                        │ Result                             │
    ├────────────────────────────────┼───────────────────────────────────┤
    │ Unknown protocol version       │ nothing written, connection closed │
    │ Root missing / unreadable      │ nothing written, connection closed │
    │ Directory cannot be listed     │ nothing written, connection closed │
    │ Malformed path or headers      │ served with empty defaults         │
    │ Anything else in the worker    │ logged with traceback, closed      │
    └────────────────────────────────┴───────────────────────────────────┘

No error status (400, 500, ...) is ever sent. The accept loop is never
affected by a failing request.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool
from .handlers import FileHandler
from .http.request import HTTPParseError


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("simplehttp.access")


class HTTPServer:
    """
    Serves a directory tree over HTTP.

    Usage:
        server = HTTPServer(ServerConfig(root="/srv/www", port=5500))
        server.run()   # Blocks until Ctrl+C / SIGTERM
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self.handler = FileHandler(
            self.config.root,
            legacy_line_endings=self.config.legacy_line_endings,
        )

        self._socket_server = SocketServer(self.config)
        self._thread_pool: Optional[ThreadPool] = None
        if self.config.concurrency == "pool":
            self._thread_pool = ThreadPool(
                min_workers=self.config.min_workers,
                max_workers=self.config.max_workers,
                queue_size=self.config.queue_size,
            )

        self._connections_handled = 0
        self._counter_lock = threading.Lock()

    @property
    def address(self):
        """Bound (host, port); meaningful once the server is listening."""
        return self._socket_server.address

    @property
    def connections_handled(self) -> int:
        with self._counter_lock:
            return self._connections_handled

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start serving. Blocks until shutdown.

        Args:
            host: Override config.host.
            port: Override config.port.
        """
        if host is not None:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        logger.info(
            f"{self.config.server_name} serving {self.handler.root} "
            f"on {self.config.host}:{self.config.port} ({self.config.concurrency} mode)"
        )

        if self._thread_pool is not None:
            self._thread_pool.start()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the accept loop to stop (safe from any thread)."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging from config.log_level."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("simplehttp").setLevel(level)

    def _shutdown(self):
        if self._thread_pool is not None:
            self._thread_pool.shutdown(wait=True, timeout=5.0)
        logger.info(f"Server stopped after {self.connections_handled} connections")

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Dispatch an accepted connection (runs on the accept loop thread).
        """
        if self._thread_pool is not None:
            submitted = self._thread_pool.submit(self._process_connection, args=(conn,))
            if not submitted:
                logger.warning(f"[{conn.id}] Thread pool full, dropping connection")
                conn.close()
            return

        # Serial mode: a thread per connection, joined before the next accept
        worker = threading.Thread(
            target=self._run_guarded,
            args=(conn,),
            name=f"Conn-{conn.id}",
            daemon=True,
        )
        worker.start()
        worker.join()

    def _run_guarded(self, conn: Connection):
        """Thread target for serial mode: no failure escapes the thread."""
        try:
            self._process_connection(conn)
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection thread failed: {e}")

    # =========================================================================
    # PROCESSING
    # =========================================================================

    def _process_connection(self, conn: Connection):
        """
        Read one request, write one response, close (worker thread).
        """
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError:
                logger.debug(f"[{conn.id}] Timed out waiting for request")
                return

            if raw_request is None:
                return

            conn.state = ConnectionState.PROCESSING
            start_time = time.time()

            try:
                request, response = self.handler.respond(raw_request)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Rejected request from {conn.client_ip}: {e}")
                return
            except OSError as e:
                logger.error(f"[{conn.id}] Filesystem error: {e}")
                return

            data = response.to_bytes(self.config.legacy_line_endings)
            if data and not conn.send_response(data):
                return

            with self._counter_lock:
                self._connections_handled += 1
                count = self._connections_handled

            duration_ms = (time.time() - start_time) * 1000
            access_logger.info(
                f"{conn.client_ip} {request.method} /{request.path} "
                f"{response.status.value} {len(data)}B {duration_ms:.1f}ms"
            )
            logger.debug(f"Connected stream: {count}")


def create_server(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server from explicit config, or from SIMPLEHTTP_* variables.
    """
    return HTTPServer(config or ServerConfig.from_env())
