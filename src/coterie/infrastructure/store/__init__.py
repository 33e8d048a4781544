"""Graph store: one validating facade over interchangeable backends."""

from coterie.infrastructure.store.base import StoreBackend
from coterie.infrastructure.store.local import LocalBackend
from coterie.infrastructure.store.memory import MemoryBackend
from coterie.infrastructure.store.remote import RemoteBackend
from coterie.infrastructure.store.snapshot import GraphSnapshot
from coterie.infrastructure.store.store import BatchFailure, BatchResult, GraphStore

__all__ = [
    "BatchFailure",
    "BatchResult",
    "GraphSnapshot",
    "GraphStore",
    "LocalBackend",
    "MemoryBackend",
    "RemoteBackend",
    "StoreBackend",
]
