"""
File sources for image resolution.

- ``LocalFileSource``: probes and browses a local data directory.
- ``HttpFileProbe``: probes paths on a host's data server with HEAD requests.

Paths handed out and accepted are relative, ``/``-separated, and rooted at
the data directory (or base URL).
"""

import asyncio
import logging
from pathlib import Path

import httpx

from ..ports import BrowseResult

logger = logging.getLogger("tome-sync.hosts.files")


class LocalFileSource:
    """File probe and browser backed by a local directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path | None:
        candidate = (self.root / path.lstrip("/")).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            return None
        return candidate

    async def exists(self, path: str) -> bool:
        target = self._resolve(path)
        return target is not None and target.is_file()

    async def browse(self, root: str) -> BrowseResult:
        """List every file below ``root`` (recursively), relative to the data directory.

        Raises:
            FileNotFoundError: If ``root`` is not a directory inside the data directory
        """
        folder = self._resolve(root)
        if folder is None or not folder.is_dir():
            raise FileNotFoundError(f"Image folder not found: {root}")
        files = sorted(
            p.relative_to(self.root).as_posix()
            for p in folder.rglob("*")
            if p.is_file()
        )
        logger.debug(f"Browsed {root}: {len(files)} file(s)")
        return BrowseResult(path=root, files=files)


class HttpFileProbe:
    """Existence probe issuing HEAD requests against a base URL.

    One ``httpx.AsyncClient`` is reused for every request; pass ``client`` to
    share an existing one. At most ``max_concurrency`` requests are in flight.
    Any transport error is treated as "does not exist".
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        max_concurrency: int = 8,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._limit = asyncio.Semaphore(max_concurrency)

    async def exists(self, path: str) -> bool:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            async with self._limit:
                response = await self._client.head(url, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.debug(f"HEAD {url} failed: {e}")
            return False
        return response.is_success

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
