"""Host adapters: in-memory world, file sources and notifiers."""

from .files import HttpFileProbe, LocalFileSource
from .memory import MemoryWorld, merge_update, set_property
from .notify import CollectingNotifier, LogNotifier

__all__ = [
    "HttpFileProbe",
    "LocalFileSource",
    "MemoryWorld",
    "merge_update",
    "set_property",
    "CollectingNotifier",
    "LogNotifier",
]
