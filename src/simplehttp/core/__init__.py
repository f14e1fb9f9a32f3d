"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing around the HTTP engine:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Binds the listening socket, runs the accept() loop               │
    │  • Wraps each client in a Connection and hands it off               │
    │  • SIGINT / SIGTERM trigger a clean shutdown                        │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          THREAD POOL                                 │
    │  • Bounded set of worker threads behind a bounded queue             │
    │  • Used in "pool" mode; "serial" mode uses one joined thread        │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • One recv(), one sendall(), graceful close                        │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
