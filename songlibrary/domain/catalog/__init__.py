"""Catalog domain services (store, enrichment, add-song workflow)."""

from .enrichment import EnrichmentClient
from .errors import (
    CatalogError,
    ClientInputError,
    ConflictError,
    DependencyError,
    NotFoundError,
    RejectedSongError,
    StoreError,
)
from .store import CatalogStore
from .workflow import AddSongResult, AddSongState, AddSongWorkflow

__all__ = [
    "CatalogStore",
    "EnrichmentClient",
    "AddSongWorkflow",
    "AddSongState",
    "AddSongResult",
    "CatalogError",
    "ClientInputError",
    "ConflictError",
    "DependencyError",
    "NotFoundError",
    "RejectedSongError",
    "StoreError",
]
