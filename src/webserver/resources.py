"""
=============================================================================
RESOURCE STORE
=============================================================================

The request handler never touches the filesystem directly. It asks a
ResourceStore four questions about a request URI:

    ┌──────────────────────┬─────────────────────────────────────────────┐
    │  is_dir(uri)         │  Does the URI name a directory?  → 403      │
    │  exists(uri)         │  Does the URI name anything?     → 404      │
    │  read_bytes(uri)     │  Raw content for the body                   │
    │  modified_time(uri)  │  Value of the Last-Modified header          │
    └──────────────────────┴─────────────────────────────────────────────┘

FileSystemStore answers them for files below a root directory. Tests can
swap in any object with the same four methods.

=============================================================================
PATH RESOLUTION
=============================================================================

The URI is treated as a path relative to the root, so "/css/site.css" with
root "/srv/www" maps to "/srv/www/css/site.css". The URI is not decoded or
normalised beyond that.

A URI that would resolve outside the root (e.g. "/../../etc/passwd") is
reported by is_forbidden() and answered with 403 Forbidden.

=============================================================================
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Union


logger = logging.getLogger(__name__)


class ResourceStore:
    """
    Interface of the resource store queried by the request handler.

    Implementations must be safe to call from several worker threads.
    """

    def is_forbidden(self, uri: str) -> bool:
        """True if the URI points outside what the store may serve."""
        return False

    def is_dir(self, uri: str) -> bool:
        raise NotImplementedError

    def exists(self, uri: str) -> bool:
        raise NotImplementedError

    def read_bytes(self, uri: str) -> bytes:
        raise NotImplementedError

    def modified_time(self, uri: str) -> datetime:
        raise NotImplementedError


class FileSystemStore(ResourceStore):
    """
    Serves files below a root directory.

    Usage:
        store = FileSystemStore("./public")
        if store.exists("/index.html"):
            content = store.read_bytes("/index.html")
    """

    def __init__(self, root_dir: Union[str, Path] = "."):
        """
        Args:
            root_dir: Directory URIs are resolved against.

        Raises:
            ValueError: If root_dir is not an existing directory.
        """
        # Resolve to absolute path (needed for the containment check)
        self.root_dir = Path(root_dir).resolve()
        if not self.root_dir.is_dir():
            raise ValueError(f"Server root directory does not exist: {root_dir}")

    def path_for(self, uri: str) -> Path:
        """Map a URI to a filesystem path below the root."""
        return self.root_dir / uri.lstrip("/")

    def is_forbidden(self, uri: str) -> bool:
        """
        Check for path traversal.

        resolve() follows ".." and symlinks; the result must still be
        inside the root.
        """
        try:
            self.path_for(uri).resolve().relative_to(self.root_dir)
        except (ValueError, OSError):
            logger.warning(f"Path traversal attempt: {uri}")
            return True
        return False

    def is_dir(self, uri: str) -> bool:
        return self.path_for(uri).is_dir()

    def exists(self, uri: str) -> bool:
        return self.path_for(uri).exists()

    def read_bytes(self, uri: str) -> bytes:
        return self.path_for(uri).read_bytes()

    def modified_time(self, uri: str) -> datetime:
        """Modification time of the file, in UTC."""
        mtime = self.path_for(uri).stat().st_mtime
        return datetime.fromtimestamp(mtime, tz=timezone.utc)
