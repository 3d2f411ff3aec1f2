"""
Read and validate the characters JSON source.

The source must be a JSON array of character objects. Anything else is a
fatal input error that aborts the import before any write happens.
"""

from __future__ import annotations

import json
from pathlib import Path

from ..base import CharacterRecord, ImportError


def parse_characters(source: str | bytes) -> list[CharacterRecord]:
    """
    Parse raw JSON text into character records.

    Args:
        source: JSON text or UTF-8 bytes holding an array of characters

    Returns:
        One CharacterRecord per array entry, in source order

    Raises:
        ImportError: If the JSON is invalid or not an array
    """
    if isinstance(source, bytes):
        try:
            source = source.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportError(f"Characters file is not valid UTF-8: {e}") from None

    try:
        data = json.loads(source)
    except json.JSONDecodeError as e:
        raise ImportError(f"Invalid JSON in characters file: {e}") from None
    except RecursionError:
        raise ImportError("Invalid JSON in characters file: nested too deeply") from None

    if not isinstance(data, list):
        raise ImportError(
            f"JSON is not an array of characters (got {type(data).__name__})."
        )

    return [CharacterRecord.from_raw(entry) for entry in data]


def read_characters_file(file_path: str | Path) -> list[CharacterRecord]:
    """
    Read and parse a local characters JSON file.

    Raises:
        ImportError: If the file is missing, unreadable or malformed
    """
    path = Path(file_path)

    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        raise ImportError(f"Characters file not found: {file_path}") from None
    except OSError as e:
        raise ImportError(f"Failed to read characters file: {e}") from None

    return parse_characters(raw)
