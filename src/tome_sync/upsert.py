"""
Create-or-update planning for imported actors.

Payloads are matched against the actors already in the import folder by
*exact* display name (``exact_key``). The later folder merge compares names
case-insensitively instead; the two rules are intentionally not unified.
"""

from typing import Any, Iterable

from pydantic import BaseModel, Field

from .models import Actor, ActorPayload
from .naming import exact_key


class UpdateEntry(BaseModel):
    """A payload routed to an existing actor."""
    actor_id: str
    payload: ActorPayload

    def to_delta(self) -> dict[str, Any]:
        return {"_id": self.actor_id, **self.payload.to_document()}


class UpsertPlan(BaseModel):
    """Partition of payloads into creates and updates, in input order."""
    to_create: list[ActorPayload] = Field(default_factory=list)
    to_update: list[UpdateEntry] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.to_create) + len(self.to_update)

    def create_documents(self) -> list[dict[str, Any]]:
        return [payload.to_document() for payload in self.to_create]

    def update_deltas(self) -> list[dict[str, Any]]:
        return [entry.to_delta() for entry in self.to_update]


def build_existing_index(actors: Iterable[Actor], folder_id: str) -> dict[str, str]:
    """Map exact display name to actor id for actors directly in a folder.

    When several actors share a name, the last one wins.
    """
    return {exact_key(a.name): a.id for a in actors if a.folder == folder_id}


def plan_upsert(payloads: Iterable[ActorPayload], existing_index: dict[str, str]) -> UpsertPlan:
    """Route each payload to create or update.

    The index is only read, so planning twice against the same index yields
    the same plan. Nothing is dropped: every payload lands in exactly one list.
    """
    plan = UpsertPlan()
    for payload in payloads:
        actor_id = existing_index.get(exact_key(payload.name))
        if actor_id is not None:
            plan.to_update.append(UpdateEntry(actor_id=actor_id, payload=payload))
        else:
            plan.to_create.append(payload)
    return plan
