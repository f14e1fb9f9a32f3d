"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    FileHandler   raw request bytes → response bytes for a serving root

=============================================================================
"""

from .files import FileHandler

__all__ = [
    "FileHandler",
]
