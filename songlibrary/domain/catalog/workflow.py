"""Add-song workflow: validate, enrich, persist, publish.

The steps run in a fixed order. A song is never persisted without a
recognized enrichment result, and publishing always references the id the
store just produced. Failures stop the run immediately; nothing is retried
and nothing already written is undone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from songlibrary.models.dto import EnrichmentResult, SongRequest
from songlibrary.observability.metrics import record_add_song_outcome

from .enrichment import EnrichmentClient
from .errors import (
    CatalogError,
    ClientInputError,
    DependencyError,
    RejectedSongError,
)
from .store import CatalogStore

logger = logging.getLogger(__name__)


class AddSongState(str, Enum):
    VALIDATING = "validating"
    ENRICHING = "enriching"
    REJECTED = "rejected"
    ENRICH_FAILED = "enrich_failed"
    PERSISTING = "persisting"
    PERSIST_FAILED = "persist_failed"
    PUBLISHING = "publishing"
    PUBLISH_FAILED = "publish_failed"
    DONE = "done"


@dataclass
class AddSongResult:
    state: AddSongState
    song_id: int
    group: str
    title: str
    enrichment: Optional[EnrichmentResult] = None


class AddSongWorkflow:
    def __init__(self, store: CatalogStore, enrichment: EnrichmentClient):
        self.store = store
        self.enrichment = enrichment

    def _fail(self, state: AddSongState, error: CatalogError) -> CatalogError:
        error.state = state
        record_add_song_outcome(state.value)
        logger.warning("Add song stopped in %s: %s", state.value, error.message,
                       extra={"operation": "add_song", "state": state.value})
        return error

    def validate(self, payload: Any) -> SongRequest:
        if not isinstance(payload, Mapping):
            raise ClientInputError("request body must be a JSON object")
        try:
            return SongRequest.model_validate(payload)
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
            raise ClientInputError(f"group and song are required non-empty strings ({fields})",
                                   cause=exc) from exc

    def run(self, payload: Any) -> AddSongResult:
        # Validating: no side effects on failure
        try:
            request = self.validate(payload)
        except ClientInputError as exc:
            raise self._fail(AddSongState.VALIDATING, exc)
        group, title = request.group, request.title

        # Enriching
        logger.debug("Enriching %s - %s", group, title)
        try:
            result = self.enrichment.fetch(group, title)
        except DependencyError as exc:
            raise self._fail(AddSongState.ENRICH_FAILED, exc)
        if not result.recognized:
            raise self._fail(
                AddSongState.REJECTED,
                RejectedSongError(f"library doesn't have song '{title}' by '{group}'"),
            )

        # Persisting: identity and fetched metadata in one transaction
        try:
            song_id = self.store.create_identity(group, title, metadata=result)
        except CatalogError as exc:
            raise self._fail(AddSongState.PERSIST_FAILED, exc)

        # Publishing: the created song is kept if this step fails
        try:
            self.enrichment.publish(result, song_id)
        except DependencyError as exc:
            raise self._fail(AddSongState.PUBLISH_FAILED, exc)

        record_add_song_outcome(AddSongState.DONE.value)
        logger.info("Song %s added: %s - %s", song_id, group, title)
        return AddSongResult(
            state=AddSongState.DONE,
            song_id=song_id,
            group=group,
            title=title,
            enrichment=result,
        )


__all__ = ["AddSongState", "AddSongResult", "AddSongWorkflow"]
