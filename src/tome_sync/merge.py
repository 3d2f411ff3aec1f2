"""
Folder reconciliation: move staging actors into the canonical folder.

Every eligible source actor ends up in exactly one of two lists. Actors whose
case-insensitive name already exists in the target folder are skipped as
duplicates; all others are planned for a move. Planning performs no writes.
"""

import logging
from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, Field

from .models import Actor, Folder
from .naming import normalize_key

logger = logging.getLogger("tome-sync.merge")


class MergeOutcome(str, Enum):
    """What a merge plan amounts to."""

    NO_SOURCE = "no_source"            # No eligible source actors at all
    ALL_DUPLICATES = "all_duplicates"  # Source actors exist but every one collides
    READY = "ready"                    # At least one actor to move


class MoveEntry(BaseModel):
    actor_id: str
    folder_id: str


class MergePlan(BaseModel):
    """Computed partition of source actors into moves and skips."""

    source_folder: str = Field(description="Source folder name")
    target_folder: str = Field(description="Target folder name")
    to_move: list[MoveEntry] = Field(default_factory=list)
    to_skip: list[str] = Field(default_factory=list, description="Names of skipped duplicates")
    eligible_count: int = 0

    @property
    def outcome(self) -> MergeOutcome:
        if self.eligible_count == 0:
            return MergeOutcome.NO_SOURCE
        if not self.to_move:
            return MergeOutcome.ALL_DUPLICATES
        return MergeOutcome.READY

    def deltas(self) -> list[dict[str, Any]]:
        """Partial updates for the single move batch."""
        return [{"_id": m.actor_id, "folder": m.folder_id} for m in self.to_move]


def is_in_folder(
    actor: Actor,
    folder: Folder,
    folders: Mapping[str, Folder],
    include_subfolders: bool = False,
) -> bool:
    """Whether an actor belongs to a folder.

    Without ``include_subfolders`` only direct members count. Otherwise the
    actor's folder chain is walked through ``parent`` links until ``folder``
    is reached or the chain ends.
    """
    if actor.folder is None:
        return False
    if not include_subfolders:
        return actor.folder == folder.id

    seen: set[str] = set()
    current: str | None = actor.folder
    while current is not None and current not in seen:
        if current == folder.id:
            return True
        seen.add(current)
        parent = folders.get(current)
        current = parent.parent if parent else None
    return False


def plan_merge(
    source_actors: Iterable[Actor],
    target_actors: Iterable[Actor],
    source_folder: Folder,
    target_folder: Folder,
    *,
    folders: Mapping[str, Folder],
    include_subfolders: bool = False,
) -> MergePlan:
    """Plan moving unique actors from ``source_folder`` into ``target_folder``.

    Args:
        source_actors: Candidate actors; those not in the source folder are ignored.
        target_actors: Actors checked for name collisions; filtered the same way.
        source_folder: Staging folder.
        target_folder: Canonical folder.
        folders: All folders by id, used to walk parent links.
        include_subfolders: Also consider members of nested folders.

    Returns:
        MergePlan; ``outcome`` is ``NO_SOURCE`` when no source actor is eligible.
    """
    target_names = {
        normalize_key(a.name)
        for a in target_actors
        if is_in_folder(a, target_folder, folders, include_subfolders)
    }

    plan = MergePlan(source_folder=source_folder.name, target_folder=target_folder.name)
    for actor in source_actors:
        if not is_in_folder(actor, source_folder, folders, include_subfolders):
            continue
        plan.eligible_count += 1
        if normalize_key(actor.name) in target_names:
            plan.to_skip.append(actor.name)
        else:
            plan.to_move.append(MoveEntry(actor_id=actor.id, folder_id=target_folder.id))

    if plan.to_skip:
        logger.info(
            f"Skipping {len(plan.to_skip)} duplicate(s) already in '{target_folder.name}': "
            f"{', '.join(plan.to_skip)}"
        )
    return plan
