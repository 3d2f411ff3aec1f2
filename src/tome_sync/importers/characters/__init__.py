"""Characters JSON import: reader, mapper and format constants."""

from .mapper import build_biography, map_record
from .reader import parse_characters, read_characters_file

__all__ = [
    "build_biography",
    "map_record",
    "parse_characters",
    "read_characters_file",
]
