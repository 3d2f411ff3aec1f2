"""
Collaborator interfaces consumed by the import pipeline.

The pipeline never reaches for a global host object. Entity storage, file
access and user notifications are passed in explicitly, which keeps the
core testable without a live host.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from .models import Actor, Folder


class ActorStore(Protocol):
    """Named-entity store holding actors."""

    def find(self, predicate: Callable[[Actor], bool]) -> list[Actor]:
        ...

    async def create_batch(self, payloads: list[dict[str, Any]]) -> list[Actor]:
        ...

    async def update_batch(self, deltas: list[dict[str, Any]]) -> list[Actor]:
        """Apply partial updates.

        Each delta carries ``_id`` plus changed fields. Dotted keys such as
        ``prototypeToken.texture.src`` update only that nested field.
        """
        ...


class FolderStore(Protocol):
    """Container store; folders form a tree through ``parent`` links."""

    def find(self, predicate: Callable[[Folder], bool]) -> list[Folder]:
        ...

    async def create(self, name: str, kind: str) -> Folder:
        ...


class FileProbe(Protocol):
    """Existence check against a fixed logical root."""

    async def exists(self, path: str) -> bool:
        ...


@dataclass
class BrowseResult:
    """Listing of a browsed folder: its path and every file below it."""
    path: str
    files: list[str] = field(default_factory=list)


class FileBrowser(Protocol):
    """Lists all files below a chosen folder."""

    async def browse(self, root: str) -> BrowseResult:
        ...


class Notifier(Protocol):
    """Fire-and-forget user-facing messages. Never used for control flow."""

    def info(self, message: str) -> None:
        ...

    def warn(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...
