"""
Base models and exceptions for the character import system.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ImportError(Exception):
    """Raised when the character source cannot be read or parsed.

    Provides a user-facing message explaining what went wrong. Raised before
    any write, so a failed import never leaves partial changes behind.
    """


class ContentSection(BaseModel):
    """One titled block of a character biography."""

    title: str | None = None
    text: str | None = None

    @field_validator("title", "text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return None if value is None else str(value)


class CharacterContent(BaseModel):
    """Structured biography: an excerpt followed by ordered sections."""

    excerpt: str | None = None
    sections: list[ContentSection | None] = Field(default_factory=list)

    @field_validator("excerpt", mode="before")
    @classmethod
    def _coerce_excerpt(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("sections", mode="before")
    @classmethod
    def _coerce_sections(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [s if isinstance(s, dict) else None for s in value]


class CharacterRecord(BaseModel):
    """A raw character entry from the source JSON.

    Only ``name``, ``race`` and ``content`` are interpreted; the full original
    entry is retained in ``raw`` for traceability.
    """

    name: str = ""
    race: str = ""
    content: CharacterContent | None = None
    raw: Any = Field(default=None, exclude=True)

    @field_validator("name", "race", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @classmethod
    def from_raw(cls, entry: Any) -> CharacterRecord:
        """Build a record from one array entry; non-objects yield an empty record."""
        data = entry if isinstance(entry, dict) else {}
        return cls.model_validate({
            "name": data.get("name"),
            "race": data.get("race"),
            "content": data.get("content"),
            "raw": entry,
        })

    def display_name(self, placeholder: str = "Unnamed Character") -> str:
        return self.name or placeholder
