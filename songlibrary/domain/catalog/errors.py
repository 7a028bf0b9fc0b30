"""Typed error taxonomy for catalog operations.

Each error carries a ``kind`` and the HTTP status/description the request
surface reports for it; the storage driver or transport exception that caused
it is kept on ``cause`` (and chained through ``raise ... from``).
"""

from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    kind = "catalog"
    status_code = 500
    description = "Internal Server Error"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None, state=None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        # Terminal AddSongState when raised from the add-song workflow
        self.state = state

    def to_dict(self) -> dict:
        return {"description": self.description, "error": self.message}


class ClientInputError(CatalogError):
    kind = "client_input"
    status_code = 400
    description = "Bad Request"


class NotFoundError(CatalogError):
    kind = "not_found"
    status_code = 400
    description = "Bad Request"


class RejectedSongError(CatalogError):
    """The enrichment service does not know the song."""

    kind = "rejected"
    status_code = 400
    description = "Bad Request"


class ConflictError(CatalogError):
    kind = "conflict"
    status_code = 409
    description = "Conflict"


class DependencyError(CatalogError):
    kind = "dependency"
    status_code = 502
    description = "Bad Gateway"


class StoreError(CatalogError):
    kind = "store"
    status_code = 500
    description = "Internal Server Error"


__all__ = [
    "CatalogError",
    "ClientInputError",
    "NotFoundError",
    "RejectedSongError",
    "ConflictError",
    "DependencyError",
    "StoreError",
]
