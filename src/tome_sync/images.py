"""
Portrait and token image resolution for character display names.

Candidate file names are built in a fixed priority order and the first
existing candidate wins, regardless of how "good" a later match would be:

  1. URL-encoded ``"<Display Name> artwork"`` + ``.png``
  2. ``"<slug> artwork.png"``
  3. ``"<slug>.png"``
  4. ``"<slug>.jpg"``
  5. ``"<slug>.jpeg"``

Tokens have a single candidate, ``"<slug> token.png"``.

Two strategies share these semantics:

- ``ListingResolver`` scans a pre-listed folder (e.g. one the user browsed),
  comparing only the final path segment, case-insensitively.
- ``ProbeResolver`` probes ``<base>/<candidate>`` against a fixed asset root,
  one candidate at a time.

A miss is never an error: the resolved field is simply ``None``.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence
from urllib.parse import quote

from .naming import slugify
from .ports import FileProbe

logger = logging.getLogger("tome-sync.images")

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_."
_URI_COMPONENT_SAFE = "!~*'()"


@dataclass(frozen=True)
class ImageCandidates:
    """Ordered candidate file names, highest priority first."""
    portrait: tuple[str, ...]
    token: tuple[str, ...]


@dataclass(frozen=True)
class ResolvedImages:
    portrait: str | None = None
    token: str | None = None


def build_candidates(display_name: str, separator: str = "-") -> ImageCandidates:
    """Build the portrait and token candidate lists for a display name.

    A name with no ASCII alphanumerics has an empty slug; only the encoded
    artwork candidate is built then, so ``.png`` style names never match.
    """
    slug = slugify(display_name, separator)
    encoded_artwork = quote(f"{display_name} artwork", safe=_URI_COMPONENT_SAFE) + ".png"
    if not slug:
        return ImageCandidates(portrait=(encoded_artwork,), token=())
    return ImageCandidates(
        portrait=(
            encoded_artwork,
            f"{slug} artwork.png",
            f"{slug}.png",
            f"{slug}.jpg",
            f"{slug}.jpeg",
        ),
        token=(f"{slug} token.png",),
    )


def basename(path: str) -> str:
    """Final ``/``-separated segment of a path."""
    return path.rstrip("/").rsplit("/", 1)[-1]


def find_by_basename(files: Iterable[str], wanted: str) -> str | None:
    """Return the first file whose basename equals ``wanted`` (case-insensitive)."""
    wanted_lower = wanted.lower()
    for path in files:
        if basename(path).lower() == wanted_lower:
            return path
    return None


class _Resolver:
    """Shared resolution loop; subclasses implement ``_first_match``."""

    def __init__(self, separator: str = "-") -> None:
        self.separator = separator

    async def _first_match(self, candidates: Sequence[str]) -> str | None:
        raise NotImplementedError

    async def resolve(self, display_name: str) -> ResolvedImages:
        """Resolve portrait and token paths for one display name."""
        candidates = build_candidates(display_name, self.separator)
        portrait = await self._first_match(candidates.portrait)
        token = await self._first_match(candidates.token)
        if portrait is None and token is None:
            logger.debug(f"No images found for '{display_name}'")
        return ResolvedImages(portrait=portrait, token=token)

    async def resolve_many(self, display_names: Sequence[str]) -> list[ResolvedImages]:
        """Resolve several names concurrently; output order matches input order."""
        return list(await asyncio.gather(*(self.resolve(name) for name in display_names)))


class ListingResolver(_Resolver):
    """Resolve against a flat list of available file paths.

    Args:
        files: Available paths, relative and possibly nested.
        base_path: When set, only files below this prefix are eligible.
        separator: Slug separator.
    """

    def __init__(
        self,
        files: Iterable[str],
        base_path: str | None = None,
        separator: str = "-",
    ) -> None:
        super().__init__(separator)
        files = list(files)
        if base_path:
            prefix = base_path.rstrip("/") + "/"
            files = [f for f in files if f.startswith(prefix)]
        self.files = files

    async def _first_match(self, candidates: Sequence[str]) -> str | None:
        for candidate in candidates:
            hit = find_by_basename(self.files, candidate)
            if hit is not None:
                return hit
        return None


class ProbeResolver(_Resolver):
    """Resolve by probing ``<base_path>/<candidate>`` for existence.

    Candidates for one name are probed strictly in order; the first one the
    probe reports as existing wins.
    """

    def __init__(self, probe: FileProbe, base_path: str, separator: str = "-") -> None:
        super().__init__(separator)
        self.probe = probe
        self.base_path = base_path.rstrip("/")

    async def _first_match(self, candidates: Sequence[str]) -> str | None:
        for candidate in candidates:
            path = f"{self.base_path}/{candidate}" if self.base_path else candidate
            try:
                found = await self.probe.exists(path)
            except Exception as e:
                # A failing probe counts as a miss; resolution never aborts the run
                logger.warning(f"Probe failed for '{path}': {e}")
                found = False
            if found:
                return path
        return None
