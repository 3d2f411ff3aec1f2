"""
Character import and folder reconciliation pipeline.

The import runs linearly through ``ImportStage``:

    idle -> records_loaded -> images_resolved -> payloads_mapped
         -> plan_computed -> applied -> reported

Everything up to ``plan_computed`` is computed without touching actors, so
a malformed source aborts the run before any actor is written. Image misses
never abort; they leave the image fields empty.

Collaborators (stores, resolvers) are passed in explicitly. No user-facing
messages are emitted here; callers render the returned result models.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .config import SyncSettings
from .images import ListingResolver, ProbeResolver
from .importers.characters import map_record, parse_characters
from .merge import MergeOutcome, MergePlan, plan_merge
from .models import Folder
from .naming import normalize_key
from .ports import ActorStore, FolderStore
from .upsert import build_existing_index, plan_upsert

logger = logging.getLogger("tome-sync.pipeline")


class FolderNotFoundError(Exception):
    """Raised when an operation requires a folder that does not exist."""


class BatchWriteError(Exception):
    """Raised when a store batch fails.

    Entities written by an earlier batch of the same run are not rolled back;
    ``written`` reports how many there were.
    """

    def __init__(self, stage: str, written: int, cause: Exception) -> None:
        self.stage = stage
        self.written = written
        self.cause = cause
        super().__init__(f"{stage} batch failed after {written} actor(s) were written: {cause}")


class ImportStage(str, Enum):
    IDLE = "idle"
    RECORDS_LOADED = "records_loaded"
    IMAGES_RESOLVED = "images_resolved"
    PAYLOADS_MAPPED = "payloads_mapped"
    PLAN_COMPUTED = "plan_computed"
    APPLIED = "applied"
    REPORTED = "reported"


def _enter(stage: ImportStage) -> ImportStage:
    logger.debug(f"Import stage: {stage.value}")
    return stage


# ----------------------------------------------------------------------
# Folders
# ----------------------------------------------------------------------

def find_folder(folders: FolderStore, name: str, kind: str = "Actor") -> Folder | None:
    """First folder of ``kind`` whose name matches case-insensitively."""
    key = normalize_key(name)
    matches = folders.find(lambda f: f.type == kind and normalize_key(f.name) == key)
    return matches[0] if matches else None


def require_folder(folders: FolderStore, name: str, kind: str = "Actor") -> Folder:
    """Look up a folder that must already exist.

    Raises:
        FolderNotFoundError: If no folder matches
    """
    folder = find_folder(folders, name, kind)
    if folder is None:
        raise FolderNotFoundError(f'Folder "{name}" not found.')
    return folder


async def get_or_create_folder(folders: FolderStore, name: str, kind: str = "Actor") -> Folder:
    """Look up a folder, creating it when missing."""
    folder = find_folder(folders, name, kind)
    if folder is None:
        logger.info(f"Creating {kind} folder '{name}'")
        folder = await folders.create(name, kind)
    return folder


def folder_index(folders: FolderStore) -> dict[str, Folder]:
    return {f.id: f for f in folders.find(lambda f: True)}


# ----------------------------------------------------------------------
# Import
# ----------------------------------------------------------------------

class CharacterImportResult(BaseModel):
    """Outcome of one characters import run."""

    folder: str = Field(description="Import folder name")
    images_from: str | None = Field(default=None, description="Folder or root images were resolved from")
    created: list[str] = Field(default_factory=list, description="Names of created actors")
    updated: list[str] = Field(default_factory=list, description="Names of updated actors")
    missing_portraits: list[str] = Field(default_factory=list)
    missing_tokens: list[str] = Field(default_factory=list)
    stage: ImportStage = ImportStage.IDLE

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def updated_count(self) -> int:
        return len(self.updated)

    def summary(self) -> str:
        """Human-readable import summary."""
        text = f'Import: {self.created_count} new, {self.updated_count} updated — Folder "{self.folder}"'
        if self.images_from:
            text += f" (Images from: {self.images_from})"
        text += "."
        if self.missing_portraits:
            text += f" No portrait for {len(self.missing_portraits)} character(s)."
        return text


async def import_characters(
    source: str | bytes,
    *,
    actors: ActorStore,
    folders: FolderStore,
    resolver: ListingResolver | ProbeResolver,
    settings: SyncSettings,
    images_from: str | None = None,
) -> CharacterImportResult:
    """Import characters JSON into the import folder as actors.

    Args:
        source: Raw characters JSON (text or bytes).
        actors: Actor store.
        folders: Folder store; the import folder is created if missing.
        resolver: Image resolver (listing or probe based).
        settings: Pipeline settings.
        images_from: Label for where images came from, used in the summary.

    Returns:
        CharacterImportResult describing created and updated actors.

    Raises:
        ImportError: If the source is malformed (nothing is written)
        BatchWriteError: If a store batch fails
    """
    _enter(ImportStage.IDLE)
    records = parse_characters(source)
    stage = _enter(ImportStage.RECORDS_LOADED)
    logger.info(f"Loaded {len(records)} character record(s)")

    folder = await get_or_create_folder(folders, settings.import_folder, settings.folder_kind)
    result = CharacterImportResult(folder=folder.name, images_from=images_from, stage=stage)

    names = [r.display_name(settings.placeholder_name) for r in records]
    images = await resolver.resolve_many(names)
    _enter(ImportStage.IMAGES_RESOLVED)

    payloads = [
        map_record(
            record,
            folder.id,
            resolved,
            actor_type=settings.actor_type,
            placeholder_name=settings.placeholder_name,
            movement_walk=settings.movement_walk,
            movement_units=settings.movement_units,
            source=settings.import_source,
        )
        for record, resolved in zip(records, images)
    ]
    for payload in payloads:
        if payload.portrait_path is None:
            result.missing_portraits.append(payload.name)
        if payload.token_path is None:
            result.missing_tokens.append(payload.name)
    _enter(ImportStage.PAYLOADS_MAPPED)

    existing = build_existing_index(actors.find(lambda a: a.folder == folder.id), folder.id)
    plan = plan_upsert(payloads, existing)
    _enter(ImportStage.PLAN_COMPUTED)
    logger.info(f"Upsert plan: {len(plan.to_create)} to create, {len(plan.to_update)} to update")

    created: list[Any] = []
    if plan.to_create:
        try:
            created = await actors.create_batch(plan.create_documents())
        except Exception as e:
            raise BatchWriteError("create", 0, e) from e
    updated: list[Any] = []
    if plan.to_update:
        try:
            updated = await actors.update_batch(plan.update_deltas())
        except Exception as e:
            raise BatchWriteError("update", len(created), e) from e
    result.stage = _enter(ImportStage.APPLIED)

    result.created = [a.name for a in created]
    result.updated = [a.name for a in updated]
    if len(created) != len(plan.to_create) or len(updated) != len(plan.to_update):
        logger.warning(
            f"Store wrote {len(created)}/{len(plan.to_create)} creates and "
            f"{len(updated)}/{len(plan.to_update)} updates"
        )
    result.stage = _enter(ImportStage.REPORTED)
    return result


# ----------------------------------------------------------------------
# Move
# ----------------------------------------------------------------------

class MoveResult(BaseModel):
    """Outcome of reconciling the import folder into the target folder."""

    plan: MergePlan
    include_subfolders: bool = False
    moved: list[str] = Field(default_factory=list, description="Ids of moved actors")

    @property
    def outcome(self) -> MergeOutcome:
        return self.plan.outcome

    @property
    def moved_count(self) -> int:
        return len(self.moved)

    @property
    def skipped(self) -> list[str]:
        return self.plan.to_skip

    def summary(self) -> str:
        plan = self.plan
        if plan.outcome == MergeOutcome.NO_SOURCE:
            suffix = " (including subfolders)" if self.include_subfolders else ""
            return f'No Actors found in folder "{plan.source_folder}"{suffix}.'
        if plan.outcome == MergeOutcome.ALL_DUPLICATES:
            return (
                f"Nothing to move — all {plan.eligible_count} Actor(s) already exist "
                f'with the same names in "{plan.target_folder}".'
            )
        return (
            f'Moved: {self.moved_count} Actor(s) to "{plan.target_folder}". '
            f"Skipped (duplicates): {len(plan.to_skip)}."
        )


async def move_unique_actors(
    *,
    actors: ActorStore,
    folders: FolderStore,
    settings: SyncSettings,
    include_subfolders: bool | None = None,
) -> MoveResult:
    """Move actors from the import folder to the target folder, skipping duplicates.

    Both folders are created when missing. The move is issued as one batch,
    and only when the plan has something to move.
    """
    if include_subfolders is None:
        include_subfolders = settings.include_subfolders

    source = await get_or_create_folder(folders, settings.import_folder, settings.folder_kind)
    target = await get_or_create_folder(folders, settings.target_folder, settings.folder_kind)
    all_actors = actors.find(lambda a: True)

    plan = plan_merge(
        all_actors,
        all_actors,
        source,
        target,
        folders=folder_index(folders),
        include_subfolders=include_subfolders,
    )
    result = MoveResult(plan=plan, include_subfolders=include_subfolders)
    if plan.outcome != MergeOutcome.READY:
        logger.info(f"Move {source.name} -> {target.name}: {plan.outcome.value}")
        return result

    try:
        moved = await actors.update_batch(plan.deltas())
    except Exception as e:
        raise BatchWriteError("move", 0, e) from e
    result.moved = [a.id for a in moved]
    return result
