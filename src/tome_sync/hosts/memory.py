"""
In-memory host implementing the actor and folder stores.

Used by the server to operate on an exported world snapshot (a JSON file
with ``actors`` and ``folders`` arrays) and by tests as a stand-in host.
Updates follow the host's partial-update rules: dotted keys address nested
fields, nested dicts merge into existing ones, everything else replaces.
Fields the models do not know about are carried through load, update and
save untouched.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable

from shortuuid import random as shortuuid_random

from ..models import Actor, Folder

logger = logging.getLogger("tome-sync.hosts.memory")

ID_LENGTH = 16


def set_property(target: dict[str, Any], key: str, value: Any) -> None:
    """Set a possibly dotted key (``a.b.c``) inside nested dicts."""
    parts = key.split(".")
    node = target
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def merge_update(target: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Apply a partial update to ``target`` in place and return it."""
    for key, value in changes.items():
        if "." in key:
            set_property(target, key, value)
        elif isinstance(value, dict) and isinstance(target.get(key), dict):
            merge_update(target[key], value)
        else:
            target[key] = value
    return target


class MemoryActorStore:
    def __init__(self) -> None:
        self._actors: dict[str, Actor] = {}

    def find(self, predicate: Callable[[Actor], bool]) -> list[Actor]:
        return [a for a in self._actors.values() if predicate(a)]

    def get(self, actor_id: str) -> Actor | None:
        return self._actors.get(actor_id)

    def add(self, actor: Actor) -> Actor:
        self._actors[actor.id] = actor
        return actor

    async def create_batch(self, payloads: list[dict[str, Any]]) -> list[Actor]:
        created = []
        for payload in payloads:
            data = dict(payload)
            data["_id"] = data.get("_id") or shortuuid_random(length=ID_LENGTH)
            created.append(self.add(Actor.model_validate(data)))
        logger.debug(f"Created {len(created)} actor(s)")
        return created

    async def update_batch(self, deltas: list[dict[str, Any]]) -> list[Actor]:
        """Apply partial updates; deltas for unknown ids are ignored."""
        updated = []
        for delta in deltas:
            changes = dict(delta)
            actor_id = changes.pop("_id", None)
            actor = self._actors.get(actor_id) if actor_id else None
            if actor is None:
                logger.warning(f"Update for unknown actor id {actor_id!r} ignored")
                continue
            document = merge_update(actor.to_document(), changes)
            updated.append(self.add(Actor.model_validate(document)))
        logger.debug(f"Updated {len(updated)} actor(s)")
        return updated


class MemoryFolderStore:
    def __init__(self) -> None:
        self._folders: dict[str, Folder] = {}

    def find(self, predicate: Callable[[Folder], bool]) -> list[Folder]:
        return [f for f in self._folders.values() if predicate(f)]

    def get(self, folder_id: str) -> Folder | None:
        return self._folders.get(folder_id)

    def add(self, folder: Folder) -> Folder:
        self._folders[folder.id] = folder
        return folder

    async def create(self, name: str, kind: str, parent: str | None = None) -> Folder:
        folder = Folder(id=shortuuid_random(length=ID_LENGTH), name=name, type=kind, parent=parent)
        return self.add(folder)


class MemoryWorld:
    """A host world holding actors and folders in memory."""

    def __init__(self) -> None:
        self.actors = MemoryActorStore()
        self.folders = MemoryFolderStore()

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "MemoryWorld":
        world = cls()
        for raw in data.get("folders", []):
            world.folders.add(Folder.model_validate(raw))
        for raw in data.get("actors", []):
            world.actors.add(Actor.model_validate(raw))
        return world

    def to_data(self) -> dict[str, Any]:
        return {
            "folders": [f.model_dump(by_alias=True) for f in self.folders.find(lambda f: True)],
            "actors": [a.to_document() for a in self.actors.find(lambda a: True)],
        }

    @classmethod
    def load(cls, path: Path) -> "MemoryWorld":
        """Load a world snapshot; a missing file yields an empty world."""
        if not path.exists():
            logger.info(f"World snapshot {path} not found, starting empty")
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_data(json.load(f))

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_data(), f, indent=2, ensure_ascii=False)
        logger.debug(f"Saved world snapshot to {path}")
