"""
=============================================================================
RESOURCE RESOLUTION
=============================================================================

Decides what a request target maps to: a redirect, a file on disk, or
nothing at all.

=============================================================================
DECISION ORDER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ResourceResolver.resolve(target)                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. REDIRECT TABLE (exact string match on the raw target)          │
    │      "/"          → Redirect("/index.html")                         │
    │      "/index.htm" → Redirect("/index.html")                         │
    │      "/index"     → Redirect("/index.html")                         │
    │      └── wins even if a file with that name exists                  │
    │                                                                      │
    │   2. DOCUMENT ROOT                                                   │
    │      root / target  →  resolve()  →  still inside root?             │
    │      └── no  → NotFound (and a warning in the log)                  │
    │                                                                      │
    │   3. REGULAR FILE?                                                   │
    │      └── no  → NotFound  (missing, directory, socket, ...)          │
    │      └── yes → Serve(path, content_type, bytes)                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /../../../etc/passwd HTTP/1.1

    Naively joined:   ./../../../etc/passwd  →  /etc/passwd

    Our protection:
        full_path = (root_dir / target).resolve()
        full_path.relative_to(root_dir)      # raises if outside root

Unlike a typical static handler we answer 404, not 403: a path outside
the root simply does not exist as far as clients are concerned.

=============================================================================
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Optional, Union

from ..http.mime_types import sniff_content_type
from ..http.outcomes import NotFound, Redirect, ResolutionOutcome, Serve


logger = logging.getLogger(__name__)


DEFAULT_REDIRECTS = {
    "/": "/index.html",
    "/index.htm": "/index.html",
    "/index": "/index.html",
}


class IOFailure(OSError):
    """A file that was confirmed to exist could not be read."""


class RedirectTable(Mapping):
    """
    Read-only mapping of alias paths to canonical paths.

    Built once at startup and shared by every connection thread. It only
    implements the Mapping protocol, so there is no way to change it
    after construction and no lock is needed.

        table = RedirectTable({"/old": "/new.html"})
        table["/"]        # "/index.html"
        table["/old"]     # "/new.html"
    """

    def __init__(self, extra: Optional[Dict[str, str]] = None, include_defaults: bool = True):
        """
        Args:
            extra: Entries added on top of (and overriding) the defaults.
            include_defaults: Seed with the /index.html aliases.
        """
        entries: Dict[str, str] = dict(DEFAULT_REDIRECTS) if include_defaults else {}
        if extra:
            entries.update(extra)
        self._entries = MappingProxyType(entries)

    def __getitem__(self, path: str) -> str:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RedirectTable({dict(self._entries)!r})"


class ResourceResolver:
    """
    Maps request targets to resolution outcomes.

    Usage:
        resolver = ResourceResolver("/var/www", RedirectTable())
        outcome = resolver.resolve("/index.html")

    A resolver holds no per-request state; one instance is shared by all
    connection threads.
    """

    def __init__(self, root_dir: Union[str, Path] = ".", redirects: Optional[RedirectTable] = None):
        """
        Args:
            root_dir: Document root. Resolved to an absolute path once,
                      so later chdir() calls do not move it.
            redirects: Redirect table; the default aliases if omitted.
        """
        self.root_dir = Path(root_dir).resolve()
        self.redirects = redirects if redirects is not None else RedirectTable()

        if not self.root_dir.is_dir():
            raise ValueError(f"Document root does not exist: {root_dir}")

    def resolve(self, target: str) -> ResolutionOutcome:
        """
        Classify a raw request target.

        Raises:
            IOFailure: The file exists but reading it failed.
        """
        # ─────────────────────────────────────────────────────────────────
        # REDIRECT TABLE FIRST
        # ─────────────────────────────────────────────────────────────────
        destination = self.redirects.get(target)
        if destination is not None:
            return Redirect(destination)

        # ─────────────────────────────────────────────────────────────────
        # FILESYSTEM LOOKUP
        # ─────────────────────────────────────────────────────────────────
        full_path = self._locate(target)
        if full_path is None:
            return NotFound()

        return self._serve_file(full_path)

    def _locate(self, target: str) -> Optional[Path]:
        """
        Find the regular file a target names, or None.

        The target is taken relative to the root exactly like "." + target:
        leading slashes are dropped and the rest is joined as-is.
        """
        relative = target.lstrip("/")

        try:
            full_path = (self.root_dir / relative).resolve()
        except (OSError, ValueError, RuntimeError):
            # Symlink loops, embedded NUL bytes, names too long
            return None

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {target!r}")
            return None

        try:
            if not full_path.is_file():
                return None
        except (OSError, ValueError):
            return None

        return full_path

    def _serve_file(self, path: Path) -> Serve:
        """Read the whole file and work out its content type."""
        try:
            body = path.read_bytes()
        except OSError as e:
            raise IOFailure(f"Failed to read {path}: {e}") from e

        return Serve(
            file_path=path,
            content_type=sniff_content_type(path, body),
            body=body,
        )
