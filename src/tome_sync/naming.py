"""
Name normalization helpers.

Two deliberately different forms are used across the import pipeline:

- ``slugify`` builds the strict, filesystem-safe form used to construct
  candidate image file names (on-disk names are sanitized).
- ``normalize_key`` builds the loose trim+lowercase form used to compare
  stored display names, which are not sanitized.

``exact_key`` is the identity used by the upsert step, which matches raw
display names exactly. It is kept separate from ``normalize_key`` on purpose.
"""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str | None, separator: str = "-") -> str:
    """Turn a display name into a lowercase, separator-joined slug.

    Args:
        name: Display name to convert. ``None`` is treated as empty.
        separator: String placed between alphanumeric runs.

    Returns:
        The slug, or an empty string when nothing alphanumeric remains.
    """
    text = unicodedata.normalize("NFKD", str(name or ""))
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    return separator.join(part for part in _NON_ALNUM.split(text) if part)


def normalize_key(name: str | None) -> str:
    """Case-insensitive comparison key (trimmed, lowercased)."""
    return str(name or "").strip().lower()


def exact_key(name: str | None) -> str:
    """Exact comparison key: the raw display name."""
    return "" if name is None else str(name)
