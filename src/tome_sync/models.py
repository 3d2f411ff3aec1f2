"""
Data models for the tome-sync import pipeline.
"""

from enum import IntEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class OwnershipLevel(IntEnum):
    """Permission levels a host grants on an actor."""
    INHERIT = -1
    NONE = 0
    LIMITED = 1
    OBSERVER = 2
    OWNER = 3


class Folder(BaseModel):
    """A named container other entities reference as their location.

    Hosts store the parent folder id under ``folder``; ``parent`` is also
    accepted on input. Unmodeled host fields (``color``, ``sorting``, ...)
    are kept and written back unchanged.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id")
    name: str
    type: str = "Actor"
    parent: str | None = Field(
        default=None,
        validation_alias=AliasChoices("parent", "folder"),
        serialization_alias="folder",
    )


class Actor(BaseModel):
    """An actor-like record as stored by the host.

    Only the fields the pipeline reads or writes are modeled. Everything else
    (``items``, ``effects``, ``_stats``, ...) rides along as extra data.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id")
    name: str
    type: str = "npc"
    folder: str | None = None  # Folder id
    img: str | None = None
    system: dict[str, Any] = Field(default_factory=dict)
    prototype_token: dict[str, Any] = Field(default_factory=dict, alias="prototypeToken")
    ownership: dict[str, int] = Field(default_factory=lambda: {"default": OwnershipLevel.NONE.value})
    flags: dict[str, Any] = Field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        """Host document form (``_id``, ``prototypeToken`` keys)."""
        return self.model_dump(by_alias=True)


class ActorPayload(BaseModel):
    """Normalized create/update payload produced from one character record.

    Built once per import run and consumed immediately by the upsert planner.
    ``portrait_path`` and ``token_path`` are ``None`` when no image matched.
    """
    name: str
    type: str = "npc"
    folder_id: str
    portrait_path: str | None = None
    token_path: str | None = None
    biography: str = ""
    race: str = ""
    movement_walk: int = 30
    movement_units: str = "ft"
    source: str = "characters.json"
    raw: Any = None  # Original record, kept for traceability

    def to_document(self) -> dict[str, Any]:
        """Render the nested host document.

        ``img`` is always present (``None`` when no portrait was found) so a
        consumer can tell "no image" from "unspecified". The token texture is
        only set when a token image exists.
        """
        doc: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "folder": self.folder_id,
            "img": self.portrait_path,
            "system": {
                "details": {
                    "race": self.race,
                    "biography": {"value": self.biography},
                },
                "attributes": {
                    "movement": {"walk": self.movement_walk, "units": self.movement_units},
                },
            },
            "flags": {
                "import": {"source": self.source, "raw": self.raw},
            },
        }
        if self.token_path:
            doc["prototypeToken"] = {"texture": {"src": self.token_path}}
        return doc
