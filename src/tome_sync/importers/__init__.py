"""
Character import from external sources.

Currently supports:
- Characters JSON (an array of {name, race, content} objects)
"""

from .characters.reader import parse_characters, read_characters_file
from .characters.mapper import build_biography, map_record
from .base import CharacterRecord, ImportError

__all__ = [
    "parse_characters",
    "read_characters_file",
    "build_biography",
    "map_record",
    "CharacterRecord",
    "ImportError",
]
