"""
Pytest configuration and fixtures for tome-sync tests.
"""

import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing tome_sync
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from tome_sync.config import SyncSettings
from tome_sync.hosts.memory import MemoryWorld
from tome_sync.models import Actor, Folder


# Configure anyio to only use asyncio (not trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings() -> SyncSettings:
    """Default settings, independent of the environment."""
    return SyncSettings()


@pytest.fixture
def world() -> MemoryWorld:
    """A world with a "Tome" staging folder and an "NPCs" folder.

    Tome holds Guard and Mira, NPCs holds guard (lowercase) and Guards.
    """
    w = MemoryWorld()
    w.folders.add(Folder(id="tome", name="Tome", type="Actor"))
    w.folders.add(Folder(id="npcs", name="NPCs", type="Actor"))
    w.actors.add(Actor(id="a1", name="Guard", folder="tome"))
    w.actors.add(Actor(id="a2", name="Mira", folder="tome"))
    w.actors.add(Actor(id="a3", name="guard", folder="npcs"))
    w.actors.add(Actor(id="a4", name="Guards", folder="npcs"))
    return w
