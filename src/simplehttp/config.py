"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunable settings in one dataclass, with environment variable loading
and fail-fast validation.

=============================================================================
WHERE DOES THE SERVING ROOT COME FROM?
=============================================================================

The serving root is an explicit setting. It defaults to the working
directory AT THE TIME THE CONFIG IS CREATED, and from then on is passed
down to the file handler:

    ServerConfig(root=...)
        │
        └──► HTTPServer
                └──► FileHandler(root)
                        └──► ResponseBuilder(root)
                                └──► PathGuard(root)

Nothing below the config reads os.getcwd(), so changing directory after
startup does not move the served tree.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    SIMPLEHTTP_HOST         Bind address           (default: 127.0.0.1)
    SIMPLEHTTP_PORT         Bind port              (default: 5500)
    SIMPLEHTTP_ROOT         Serving root           (default: cwd)
    SIMPLEHTTP_WORKERS      Max worker threads     (default: 8)
    SIMPLEHTTP_CONCURRENCY  "pool" or "serial"     (default: pool)
    SIMPLEHTTP_LOG_LEVEL    Logging level          (default: INFO)

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Optional


# Connection dispatch modes
CONCURRENCY_MODES = ("pool", "serial")


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, buffer_size, timeout

    FILES
    - root

    CONCURRENCY
    - concurrency, min_workers, max_workers, queue_size

    WIRE FORMAT
    - legacy_line_endings

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind to. Loopback only by default."""

    port: int = 5500
    """Port to listen on."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 1024
    """
    Bytes read from each connection, in a single recv().
    Anything beyond this is never read: larger requests are truncated.
    """

    timeout: Optional[float] = 30.0
    """
    Socket timeout for client reads and writes, in seconds.
    None = block forever.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    root: str = field(default_factory=os.getcwd)
    """Directory served to clients."""

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    concurrency: str = "pool"
    """
    How accepted connections are dispatched.
    "pool"   - handed to a bounded worker pool; accept() keeps going
    "serial" - one thread per connection, joined before the next accept()
    """

    min_workers: int = 2
    """Worker threads started with the pool."""

    max_workers: int = 8
    """Upper bound on worker threads."""

    queue_size: int = 64
    """Connections allowed to wait for a worker before new ones are dropped."""

    # ─────────────────────────────────────────────────────────────────────
    # WIRE FORMAT
    # ─────────────────────────────────────────────────────────────────────

    legacy_line_endings: bool = False
    """
    Join response header lines with a bare "\\n" (for old clients)
    instead of "\\r\\n". The header/body separator is CRLF CRLF either way.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    server_name: str = "simplehttp/0.1"
    """Name used in the startup log line."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from SIMPLEHTTP_* environment variables.

        Unset variables fall back to the dataclass defaults.
        """
        return cls(
            host=os.getenv("SIMPLEHTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("SIMPLEHTTP_PORT", "5500")),
            root=os.getenv("SIMPLEHTTP_ROOT") or os.getcwd(),
            max_workers=int(os.getenv("SIMPLEHTTP_WORKERS", "8")),
            concurrency=os.getenv("SIMPLEHTTP_CONCURRENCY", "pool"),
            log_level=os.getenv("SIMPLEHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values at startup.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not os.path.isdir(self.root):
            raise ValueError(f"Serving root is not a directory: {self.root}")

        if self.concurrency not in CONCURRENCY_MODES:
            raise ValueError(
                f"Invalid concurrency: {self.concurrency!r}. "
                f"Must be one of {', '.join(CONCURRENCY_MODES)}."
            )

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")
