"""Synchronization of note content with stored links and edges."""

from notegraph.sync.resolver import TitleResolver
from notegraph.sync.synchronizer import GraphSynchronizer, SyncReport, SyncState

__all__ = [
    "GraphSynchronizer",
    "SyncReport",
    "SyncState",
    "TitleResolver",
]
