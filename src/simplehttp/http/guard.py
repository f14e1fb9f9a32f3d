"""
=============================================================================
PATH SECURITY GUARD
=============================================================================

Maps a decoded request path onto the serving root without letting it
escape.

=============================================================================
PATH TRAVERSAL
=============================================================================

The resource path comes straight from the client. Joined naively onto
the root, ".." segments walk out of it:

    root:     /srv/www
    request:  GET /../../etc/passwd HTTP/1.1
    joined:   /srv/www/../../etc/passwd
    resolved: /etc/passwd                     ◄── outside the root!

Symlinks inside the root can do the same thing without any "..":

    /srv/www/shortcut → /home/alice
    request:  GET /shortcut/.ssh/id_rsa

=============================================================================
THE CHECK
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  1. canonical_root = root.resolve(strict=True)                      │
    │  2. candidate      = (root / resource_path).resolve()               │
    │  3. candidate is canonical_root or inside it?                       │
    │         yes → serve candidate                                       │
    │         no  → serve canonical_root instead                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

An escaping request is not rejected: it is answered with the listing of
the root itself.

Comparing only path DEPTH ("is the candidate at least as deep as the
root?") is not enough: /srv/other/x is as deep as /srv/www but is a
sibling, not a descendant. The check here asks Path.relative_to() whether
the root is a real ancestor.

The candidate is resolved non-strictly, so a path that does not exist
still produces a target (which the response builder reports as not
found). The root, on the other hand, must exist.

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Union


logger = logging.getLogger(__name__)


class PathGuard:
    """
    Confines request paths to a serving root.

    Usage:
        guard = PathGuard("/srv/www")
        guard.resolve("docs/readme.txt")    # Path("/srv/www/docs/readme.txt")
        guard.resolve("../../etc/passwd")   # Path("/srv/www")
    """

    def __init__(self, root: Union[str, os.PathLike]):
        """
        Args:
            root: Directory to serve from. Made absolute once, here, and
                  canonicalized on every call to resolve(), so a root that
                  disappears is noticed but a later chdir() changes nothing.
        """
        self.root = Path(root).absolute()

    def resolve(self, resource_path: str) -> Path:
        """
        Turn a decoded resource path into a canonical filesystem target.

        Args:
            resource_path: Decoded request path without leading "/".

        Returns:
            Canonical path inside the root, or the canonical root itself
            when the request tried to leave it.

        Raises:
            FileNotFoundError: The root does not exist.
            OSError: The root or the target cannot be canonicalized
                     (including a "%00" in the request path).
        """
        canonical_root = self.root.resolve(strict=True)

        if "\0" in resource_path:
            raise OSError(f"Embedded null byte in path: {resource_path!r}")

        try:
            candidate = (self.root / resource_path).resolve()
        except ValueError as e:
            raise OSError(f"Cannot canonicalize {resource_path!r}: {e}") from e

        if not self.is_within_root(candidate, canonical_root):
            logger.warning(f"Path traversal attempt: {resource_path!r}, serving root")
            return canonical_root

        return candidate

    @staticmethod
    def is_within_root(candidate: Path, canonical_root: Path) -> bool:
        """True if candidate is canonical_root or one of its descendants."""
        try:
            candidate.relative_to(canonical_root)
        except ValueError:
            return False
        return True
