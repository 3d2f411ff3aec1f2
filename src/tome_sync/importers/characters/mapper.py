"""
Map character records to normalized actor payloads.

Mapping is pure: the same record, folder and resolved images always produce
the same payload. Missing optional fields degrade to empty values and never
raise.
"""

from __future__ import annotations

from ...images import ResolvedImages
from ...models import ActorPayload
from ..base import CharacterContent, CharacterRecord
from .schema import (
    ACTOR_TYPE,
    DEFAULT_MOVEMENT_UNITS,
    DEFAULT_MOVEMENT_WALK,
    IMPORT_SOURCE,
    PLACEHOLDER_NAME,
    SECTION_TITLE_TEMPLATE,
)


def build_biography(content: CharacterContent | None) -> str:
    """Assemble biography text from an excerpt and titled sections.

    The trimmed excerpt comes first, then one block per section: an optional
    bold title line followed by the section text. Blocks are separated by a
    blank line and trailing whitespace is trimmed.

    Args:
        content: Structured biography, or None.

    Returns:
        Biography text; empty string when there is no content.
    """
    if content is None:
        return ""

    blocks: list[str] = []
    if content.excerpt and content.excerpt.strip():
        blocks.append(content.excerpt.strip())

    for section in content.sections:
        if section is None:
            continue
        text = (section.text or "").strip()
        if section.title:
            title_line = SECTION_TITLE_TEMPLATE.format(title=section.title)
            blocks.append(f"{title_line}\n{text}" if text else title_line)
        elif text:
            blocks.append(text)

    return "\n\n".join(blocks).strip()


def map_record(
    record: CharacterRecord,
    folder_id: str,
    images: ResolvedImages,
    *,
    actor_type: str = ACTOR_TYPE,
    placeholder_name: str = PLACEHOLDER_NAME,
    movement_walk: int = DEFAULT_MOVEMENT_WALK,
    movement_units: str = DEFAULT_MOVEMENT_UNITS,
    source: str = IMPORT_SOURCE,
) -> ActorPayload:
    """Turn one character record into an actor payload.

    Args:
        record: Parsed character record.
        folder_id: Id of the folder the actor belongs in.
        images: Resolved portrait and token paths (either may be None).

    Returns:
        ActorPayload ready for the upsert planner.
    """
    return ActorPayload(
        name=record.display_name(placeholder_name),
        type=actor_type,
        folder_id=folder_id,
        portrait_path=images.portrait,
        token_path=images.token,
        biography=build_biography(record.content),
        race=record.race,
        movement_walk=movement_walk,
        movement_units=movement_units,
        source=source,
        raw=record.raw,
    )
