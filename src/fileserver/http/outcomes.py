"""
Resolution outcomes.

Exactly one of these is produced per request by the resource resolver
and consumed straight away by the response writer. They are plain
frozen values, owned by the connection thread and dropped after the
response is sent.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class Redirect:
    """Target is an alias; send the client to `destination`."""
    destination: str


@dataclass(frozen=True)
class NotFound:
    """Target is neither an alias nor a regular file under the root."""


@dataclass(frozen=True)
class Serve:
    """Target is a regular file; `body` holds its full content."""
    file_path: Path
    content_type: str
    body: bytes


ResolutionOutcome = Union[Redirect, NotFound, Serve]
