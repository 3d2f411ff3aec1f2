"""
Single-purpose batch field updates on the actors of one folder.

Each operation targets direct members of an existing folder (a missing
folder raises ``FolderNotFoundError``), computes all deltas first and then
issues a single ``update_batch`` call.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .images import ListingResolver, ProbeResolver
from .models import Actor, OwnershipLevel
from .pipeline import BatchWriteError, require_folder
from .ports import ActorStore, FolderStore

logger = logging.getLogger("tome-sync.batch")


class BatchOutcome(str, Enum):
    EMPTY_FOLDER = "empty_folder"  # Folder has no actors
    UP_TO_DATE = "up_to_date"      # Nothing needed changing
    UPDATED = "updated"


class BatchResult(BaseModel):
    """Outcome of a batch field update."""

    operation: str
    folder: str
    outcome: BatchOutcome
    updated: list[str] = Field(default_factory=list, description="Names of updated actors")
    unchanged: list[str] = Field(default_factory=list, description="Names of actors left as they were")

    @property
    def updated_count(self) -> int:
        return len(self.updated)

    def summary(self) -> str:
        if self.outcome == BatchOutcome.EMPTY_FOLDER:
            return f'No Actors found in folder "{self.folder}".'
        if self.outcome == BatchOutcome.UP_TO_DATE:
            return f'{self.operation}: all Actors in folder "{self.folder}" are already up to date.'
        text = f'{self.operation}: {self.updated_count} Actor(s) updated in folder "{self.folder}".'
        if self.unchanged:
            text += f" Unchanged: {len(self.unchanged)}."
        return text


def _folder_actors(actors: ActorStore, folders: FolderStore, folder_name: str, kind: str) -> tuple[str, list[Actor]]:
    folder = require_folder(folders, folder_name, kind)
    return folder.name, actors.find(lambda a: a.folder == folder.id)


async def _apply(
    operation: str,
    folder: str,
    actors: ActorStore,
    members: list[Actor],
    deltas: list[dict[str, Any]],
) -> BatchResult:
    if not members:
        return BatchResult(operation=operation, folder=folder, outcome=BatchOutcome.EMPTY_FOLDER)

    changed_ids = {d["_id"] for d in deltas}
    unchanged = [a.name for a in members if a.id not in changed_ids]
    if not deltas:
        return BatchResult(
            operation=operation, folder=folder, outcome=BatchOutcome.UP_TO_DATE, unchanged=unchanged,
        )

    try:
        written = await actors.update_batch(deltas)
    except Exception as e:
        raise BatchWriteError(operation, 0, e) from e
    logger.info(f"{operation}: updated {len(written)} actor(s) in '{folder}'")
    return BatchResult(
        operation=operation,
        folder=folder,
        outcome=BatchOutcome.UPDATED,
        updated=[a.name for a in written],
        unchanged=unchanged,
    )


async def enable_actor_link(
    folder_name: str,
    *,
    actors: ActorStore,
    folders: FolderStore,
    kind: str = "Actor",
) -> BatchResult:
    """Set ``prototypeToken.actorLink`` on every actor that does not have it yet."""
    folder, members = _folder_actors(actors, folders, folder_name, kind)
    deltas = [
        {"_id": a.id, "prototypeToken.actorLink": True}
        for a in members
        if a.prototype_token.get("actorLink") is not True
    ]
    return await _apply("Link Actor Data", folder, actors, members, deltas)


async def set_default_ownership(
    folder_name: str,
    level: OwnershipLevel = OwnershipLevel.LIMITED,
    *,
    actors: ActorStore,
    folders: FolderStore,
    kind: str = "Actor",
) -> BatchResult:
    """Set the default ("All Players") ownership level.

    Per-user ownership entries are preserved.
    """
    folder, members = _folder_actors(actors, folders, folder_name, kind)
    deltas = [
        {"_id": a.id, "ownership": {**a.ownership, "default": int(level)}}
        for a in members
    ]
    return await _apply(f"Default ownership {level.name}", folder, actors, members, deltas)


async def refresh_actor_images(
    folder_name: str,
    resolver: ListingResolver | ProbeResolver,
    *,
    actors: ActorStore,
    folders: FolderStore,
    kind: str = "Actor",
) -> BatchResult:
    """Re-resolve portrait and token images for the actors of a folder.

    A portrait sets ``img`` and the token texture; a token image, when found,
    takes over the token texture. Actors without any match are left alone.
    """
    folder, members = _folder_actors(actors, folders, folder_name, kind)
    resolved = await resolver.resolve_many([a.name for a in members])

    deltas: list[dict[str, Any]] = []
    for actor, images in zip(members, resolved):
        delta: dict[str, Any] = {}
        if images.portrait:
            delta["img"] = images.portrait
            delta["prototypeToken.texture.src"] = images.portrait
        if images.token:
            delta["prototypeToken.texture.src"] = images.token
        if delta:
            deltas.append({"_id": actor.id, **delta})
        else:
            logger.info(f"No image files found for {actor.name}")
    return await _apply("Image refresh", folder, actors, members, deltas)
