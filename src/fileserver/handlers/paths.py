"""
=============================================================================
PATH RESOLVER & SAFETY CHECK
=============================================================================

Maps a request route onto the filesystem and decides whether it is safe to
serve.

=============================================================================
THE ATTACK
=============================================================================

    GET /../../etc/passwd HTTP/1.1
    GET /%2e%2e/%2e%2e/etc/passwd HTTP/1.1       (same thing, encoded)
    GET /link-to-root/etc/passwd HTTP/1.1        (symlink inside the root)

Each of these joins onto the root to produce a path whose REAL location is
outside it. String checks like `".." in path` miss the symlink case and
reject harmless names like "notes..txt", so we compare canonical paths
instead.

=============================================================================
THE CHECK
=============================================================================

    route ──unquote──► decoded ──lstrip("/")──► root / decoded = joined
                                                          │
                         ┌────────────────────────────────┴───────────┐
                         │ joined exists?                             │
                         ▼ yes                                    no  ▼
               realpath(joined)                        realpath(joined.parent)
                         │                                            │
                         └──────────────► under realpath(root)? ◄─────┘
                                           │              │
                                        SAFE           UNSAFE

Before any of that, the joined path is normalized lexically. If ".."
segments alone already carry it outside the root it is UNSAFE, whether or
not the target exists, so "GET /../../no/such/file" is a 403 and not a 404.

Checking the parent for missing paths lets "GET /missing.txt" reach the
404 branch. A missing path whose parent cannot be canonicalized either
("GET /no-such-dir/file") surfaces as ERROR (served as 404).

"Under" is a component-wise test: /srv/www2 is NOT under /srv/www.

=============================================================================
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote


class PathSafety(Enum):
    """Outcome of a safety check."""
    SAFE = "safe"        # Canonical path lies under the root
    UNSAFE = "unsafe"    # Escapes the root → 403
    ERROR = "error"      # Canonicalization failed → 404


@dataclass(frozen=True)
class PathResolution:
    """
    Result of resolving a route.

    Attributes:
        safety: SAFE, UNSAFE or ERROR.
        path:   root joined with the decoded route. NOT canonicalized;
                handlers serve this path so symlinks inside the root keep
                their names in listings.
        error:  The OSError behind an ERROR result.
    """
    safety: PathSafety
    path: Path
    error: Optional[OSError] = None

    @property
    def is_safe(self) -> bool:
        return self.safety is PathSafety.SAFE


class PathResolver:
    """
    Resolves routes against one served root.

    The root is canonicalized on every call rather than cached, so a root
    that disappears or loses permissions mid-run produces ERROR results
    instead of stale answers.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def join(self, route: str) -> Path:
        """
        Decode a route and join it onto the root.

        All leading slashes are dropped after decoding so that
        "//etc/passwd" or "%2Fetc%2Fpasswd" cannot produce an absolute
        path that replaces the root.
        """
        decoded = unquote(route)
        return self.root / decoded.lstrip("/")

    def resolve(self, route: str) -> PathResolution:
        """
        Resolve a route and classify it.

        Args:
            route: Request route, still percent-encoded.

        Returns:
            PathResolution describing the joined path and its safety.
        """
        joined = self.join(route)

        # Embedded NULs cannot name a real file and make os calls raise
        if "\x00" in str(joined):
            return PathResolution(PathSafety.UNSAFE, joined)

        if not is_within(Path(os.path.abspath(joined)), Path(os.path.abspath(self.root))):
            return PathResolution(PathSafety.UNSAFE, joined)

        try:
            canonical_root = self.root.resolve(strict=True)

            if os.path.exists(joined):
                target = joined.resolve(strict=True)
            else:
                target = joined.parent.resolve(strict=True)
        except OSError as e:
            return PathResolution(PathSafety.ERROR, joined, e)
        except RuntimeError as e:
            # Symlink loops raise RuntimeError before Python 3.13
            return PathResolution(PathSafety.ERROR, joined, OSError(str(e)))

        if is_within(target, canonical_root):
            return PathResolution(PathSafety.SAFE, joined)
        return PathResolution(PathSafety.UNSAFE, joined)

    def is_root(self, path: Union[str, Path]) -> bool:
        """True when `path` names the served root itself."""
        try:
            return Path(path).resolve() == self.root.resolve()
        except OSError:
            return False


def is_within(path: Path, root: Path) -> bool:
    """Component-wise "path is root or lies below root"."""
    return path == root or root in path.parents
