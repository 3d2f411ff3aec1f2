"""
tome-sync - Import characters as actors and reconcile actor folders of a host world.
"""

from .models import Actor, ActorPayload, Folder, OwnershipLevel
from .config import SyncSettings, load_settings

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("tome-sync")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = ["Actor", "ActorPayload", "Folder", "OwnershipLevel", "SyncSettings", "load_settings"]
