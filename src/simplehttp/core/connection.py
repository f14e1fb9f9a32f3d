"""
=============================================================================
CONNECTION
=============================================================================

Wraps an accepted client socket for exactly one request/response
exchange.

=============================================================================
ONE READ, ONE WRITE, CLOSE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept() ──► Connection                                           │
    │                   │                                                  │
    │                   ├──► read_request()   ONE recv(buffer_size)        │
    │                   │                                                  │
    │                   ├──► send_response()  sendall(response bytes)      │
    │                   │                                                  │
    │                   └──► close()          FIN, drain, close            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

TCP is a byte stream: a single recv() may return only part of what the
client sent. This server does not loop until "\r\n\r\n" arrives. It takes
whatever the first recv() delivers, at most buffer_size bytes, and parses
that. Requests larger than the buffer are truncated.

There is no keep-alive: every connection carries one request.

=============================================================================
CONNECTION STATES
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
     │         │             │                        ▲
     └─────────┴─────────────┴────────────────────────┘
                 (errors skip straight to CLOSING)

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and debugging."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A single accepted client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used in log lines.
        state: Current ConnectionState.
        created_at: Time the connection was accepted.
        buffer_size: Maximum bytes read for the request.
        timeout: Socket timeout in seconds (None = blocking).
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: Optional[float] = 30.0

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    def read_request(self) -> Optional[bytes]:
        """
        Read the request with a single recv().

        Returns:
            Up to buffer_size bytes, or None if the client closed the
            connection without sending anything.

        Raises:
            TimeoutError: Nothing arrived within the socket timeout.
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout:
            raise TimeoutError("Request read timeout")
        except (ConnectionResetError, BrokenPipeError):
            return None

        if not data:
            return None

        if len(data) == self.buffer_size:
            logger.debug(f"[{self.id}] Request filled the {self.buffer_size}-byte buffer, may be truncated")

        return data

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes with sendall().

        Returns:
            True if everything was sent, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection gracefully.

        shutdown(SHUT_WR) sends FIN so the client sees end-of-response,
        then any unread request bytes are drained before close().
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Client already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except (socket.timeout, OSError):
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
