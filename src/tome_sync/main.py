"""
tome-sync MCP Server
Imports characters JSON as actors and reconciles actor folders of a host world.
"""

import logging
from pathlib import Path
from typing import Annotated, Awaitable

from fastmcp import FastMCP
from pydantic import Field

from .batch import BatchOutcome, BatchResult, enable_actor_link, refresh_actor_images, set_default_ownership
from .config import SyncSettings, load_settings
from .hosts import CollectingNotifier, HttpFileProbe, LocalFileSource, MemoryWorld
from .images import ListingResolver, ProbeResolver
from .importers import ImportError
from .models import OwnershipLevel
from .merge import MergeOutcome
from .pipeline import BatchWriteError, FolderNotFoundError, import_characters, move_unique_actors
from .ports import FileBrowser, FileProbe, Notifier

logger = logging.getLogger("tome-sync")

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    )

data_root = (settings.data_root or Path.cwd()).resolve()
world_path = (settings.world_path or data_root / "world.json").resolve()
logger.debug(f"📂 Data root: {data_root}")
logger.debug(f"🌍 World snapshot: {world_path}")

world = MemoryWorld.load(world_path)
files = LocalFileSource(data_root)
probe: FileProbe = HttpFileProbe(settings.data_url) if settings.data_url else files

mcp = FastMCP(
    name="tome-sync"
)


# ----------------------------------------------------------------------
# Tool implementations
# ----------------------------------------------------------------------

async def _import_characters_impl(
    world: MemoryWorld,
    files: FileBrowser,
    probe: FileProbe,
    settings: SyncSettings,
    notifier: Notifier,
    json_path: Path,
    images_folder: str | None = None,
    move_after_import: bool = True,
) -> bool:
    """Import a characters file, then optionally move unique actors.

    Returns:
        True if anything was written.
    """
    try:
        source = json_path.read_bytes()
    except OSError as e:
        notifier.error(f"Cannot read characters file {json_path}: {e}")
        return False

    if images_folder:
        try:
            listing = await files.browse(images_folder)
        except FileNotFoundError as e:
            notifier.error(str(e))
            return False
        resolver: ListingResolver | ProbeResolver = ListingResolver(
            listing.files, separator=settings.slug_separator,
        )
        images_from = listing.path
    else:
        resolver = ProbeResolver(probe, settings.image_base, separator=settings.slug_separator)
        images_from = settings.image_base

    try:
        result = await import_characters(
            source,
            actors=world.actors,
            folders=world.folders,
            resolver=resolver,
            settings=settings,
            images_from=images_from,
        )
    except ImportError as e:
        notifier.error(f"Import failed: {e}")
        return False
    except BatchWriteError as e:
        notifier.error(f"Import failed: {e}")
        return e.written > 0
    notifier.info(result.summary())

    if move_after_import:
        await _move_unique_actors_impl(world, settings, notifier)
    return True


async def _move_unique_actors_impl(
    world: MemoryWorld,
    settings: SyncSettings,
    notifier: Notifier,
    include_subfolders: bool | None = None,
) -> bool:
    try:
        result = await move_unique_actors(
            actors=world.actors,
            folders=world.folders,
            settings=settings,
            include_subfolders=include_subfolders,
        )
    except BatchWriteError as e:
        notifier.error(f"Move failed: {e}")
        return False

    if result.plan.to_skip:
        logger.info(f"Skipped (name duplicates): {result.plan.to_skip}")
    if result.moved:
        notifier.info(result.summary())
        return True
    if result.outcome == MergeOutcome.NO_SOURCE:
        notifier.warn(result.summary())
    else:
        notifier.info(result.summary())
    return False


async def _batch_impl(notifier: Notifier, operation: Awaitable[BatchResult]) -> bool:
    try:
        result = await operation
    except FolderNotFoundError as e:
        notifier.error(str(e))
        return False
    except BatchWriteError as e:
        notifier.error(f"Update failed: {e}")
        return False

    if result.outcome == BatchOutcome.EMPTY_FOLDER:
        notifier.warn(result.summary())
    else:
        notifier.info(result.summary())
    return result.updated_count > 0


def _persist(changed: bool) -> None:
    if changed:
        world.save(world_path)


# ----------------------------------------------------------------------
# Tools
# ----------------------------------------------------------------------

@mcp.tool
async def import_characters_tool(
    json_path: Annotated[str, Field(description="Path to the characters JSON file (an array of characters)")],
    images_folder: Annotated[str | None, Field(description="Folder below the data root to search for images. Omit to probe the configured image base.")] = None,
    move_after_import: Annotated[bool, Field(description="Move actors with unique names to the target folder after importing")] = True,
) -> str:
    """Import characters as actors into the import folder.

    Resolves each character's portrait and token image, creates new actors or
    updates those with the same name, then moves actors whose names are not yet
    in the target folder.
    """
    notifier = CollectingNotifier()
    path = Path(json_path)
    if not path.is_absolute():
        path = data_root / path
    changed = await _import_characters_impl(
        world, files, probe, settings, notifier, path, images_folder, move_after_import,
    )
    _persist(changed)
    return notifier.render()


@mcp.tool
async def move_unique_actors_tool(
    include_subfolders: Annotated[bool | None, Field(description="Also consider actors in subfolders. Omit to use the configured default.")] = None,
) -> str:
    """Move actors from the import folder to the target folder, skipping name duplicates."""
    notifier = CollectingNotifier()
    _persist(await _move_unique_actors_impl(world, settings, notifier, include_subfolders))
    return notifier.render()


@mcp.tool
async def enable_actor_link_tool(
    folder_name: Annotated[str, Field(description="Folder whose actors get 'Link Actor Data' enabled")] = "NPCs",
) -> str:
    """Enable "Link Actor Data" for all actors directly in a folder."""
    notifier = CollectingNotifier()
    operation = enable_actor_link(
        folder_name, actors=world.actors, folders=world.folders, kind=settings.folder_kind,
    )
    _persist(await _batch_impl(notifier, operation))
    return notifier.render()


@mcp.tool
async def set_default_ownership_tool(
    folder_name: Annotated[str, Field(description="Folder whose actors get the new default ownership")] = "NPCs",
    level: Annotated[str, Field(description="Ownership level: none, limited, observer, owner")] = "limited",
) -> str:
    """Set the "All Players" ownership of all actors directly in a folder."""
    try:
        ownership = OwnershipLevel[level.strip().upper()]
    except KeyError:
        return f"Invalid ownership level '{level}'. Use: none, limited, observer, owner"

    notifier = CollectingNotifier()
    operation = set_default_ownership(
        folder_name, ownership, actors=world.actors, folders=world.folders, kind=settings.folder_kind,
    )
    _persist(await _batch_impl(notifier, operation))
    return notifier.render()


@mcp.tool
async def refresh_actor_images_tool(
    folder_name: Annotated[str, Field(description="Folder whose actors get their images re-resolved")] = "NPCs",
) -> str:
    """Re-resolve portrait and token images from the configured image base."""
    notifier = CollectingNotifier()
    resolver = ProbeResolver(probe, settings.image_base, separator=settings.slug_separator)
    operation = refresh_actor_images(
        folder_name, resolver, actors=world.actors, folders=world.folders, kind=settings.folder_kind,
    )
    _persist(await _batch_impl(notifier, operation))
    return notifier.render()


logger.debug("✅ All tools registered. tome-sync server ready")


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
