from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Tuple, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from songlibrary.database.db_manager import Song, SongInfo, db
from songlibrary.models.dto import CatalogEntry, CatalogPage, EnrichmentResult, Pagination, SongInfoPatch
from songlibrary.observability.metrics import record_store_error

from .errors import ConflictError, NotFoundError, StoreError

logger = logging.getLogger(__name__)

_PATCHABLE_FIELDS = ("release_date", "text", "link")
MAX_PAGE_SIZE = 100


class CatalogStore:
    """Sole writer of songs and their metadata rows.

    Every mutation commits (or rolls back) as one unit; storage failures are
    rolled back and re-raised as :class:`StoreError`.
    """

    def __init__(self, page_size: int = 20):
        self.page_size = max(1, min(MAX_PAGE_SIZE, page_size))

    def _store_error(self, operation: str, exc: SQLAlchemyError, message: str) -> StoreError:
        db.session.rollback()
        record_store_error(operation)
        logger.error("%s failed: %s", operation, exc, exc_info=True, extra={"operation": operation})
        return StoreError(message, cause=exc)

    # --- writes ---
    def create_identity(self, group: str, title: str, metadata: Optional[EnrichmentResult] = None) -> int:
        """Insert a song and its metadata row in a single transaction.

        The metadata row is empty unless ``metadata`` is given.
        """
        song = Song(music_group=group, title=title)
        if metadata is not None:
            song.info = SongInfo(
                release_date=metadata.release_date,
                text=metadata.text,
                link=metadata.link,
            )
        else:
            song.info = SongInfo()
        db.session.add(song)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            logger.info("Duplicate song rejected: %s - %s", group, title)
            raise ConflictError(f"song '{title}' by '{group}' already exists", cause=e) from e
        except SQLAlchemyError as e:
            raise self._store_error("create_identity", e, "failed to store song") from e

        song_id = song.id
        logger.info("Created song %s: %s - %s", song_id, group, title)
        return song_id

    def update_metadata(self, song_id: int, patch: Union[SongInfoPatch, Mapping[str, object]]) -> None:
        """Merge-patch the metadata of ``song_id``; absent fields keep their value."""
        if isinstance(patch, SongInfoPatch):
            changes = patch.changes()
        else:
            changes = {k: v for k, v in patch.items() if k in _PATCHABLE_FIELDS and v is not None}

        try:
            song = db.session.get(Song, song_id)
            if song is None:
                raise NotFoundError(f"song with id {song_id} not found")
            info = song.info
            if info is None:
                info = SongInfo()
                song.info = info
            for name, value in changes.items():
                setattr(info, name, value)
            db.session.commit()
        except SQLAlchemyError as e:
            raise self._store_error("update_metadata", e, "failed to update song info") from e

        logger.info("Updated song %s fields=%s", song_id, sorted(changes))

    def delete_identity(self, song_id: int) -> int:
        """Delete a song; its metadata row goes with it via ON DELETE CASCADE.

        Returns the number of deleted songs (0 when the id is unknown).
        """
        try:
            result = db.session.execute(delete(Song).where(Song.id == song_id))
            db.session.commit()
        except SQLAlchemyError as e:
            raise self._store_error("delete_identity", e, "failed to delete song") from e
        deleted = result.rowcount or 0
        if deleted:
            logger.info("Deleted song %s", song_id)
        return deleted

    # --- reads ---
    def get_text(self, song_id: int) -> Tuple[bool, Optional[str]]:
        """Return ``(found, text)``; ``found`` is False when no metadata row exists."""
        try:
            row = db.session.execute(
                select(SongInfo.text).where(SongInfo.song_id == song_id)
            ).first()
        except SQLAlchemyError as e:
            raise self._store_error("get_text", e, "failed to read song text") from e
        if row is None:
            return False, None
        return True, row.text

    def get_entry(self, song_id: int) -> Optional[CatalogEntry]:
        try:
            song = db.session.get(Song, song_id, options=[joinedload(Song.info)])
        except SQLAlchemyError as e:
            raise self._store_error("get_entry", e, "failed to read song") from e
        if song is None:
            return None
        return CatalogEntry.model_validate(song.to_entry())

    def list_all(self) -> List[CatalogEntry]:
        try:
            songs = Song.query.options(joinedload(Song.info)).order_by(Song.id).all()
        except SQLAlchemyError as e:
            raise self._store_error("list_all", e, "failed to read library") from e
        return [CatalogEntry.model_validate(song.to_entry()) for song in songs]

    def list_page(self, page: int = 1, per_page: Optional[int] = None) -> CatalogPage:
        page = max(1, page)
        per_page = max(1, min(MAX_PAGE_SIZE, per_page or self.page_size))
        try:
            pagination = (
                Song.query.options(joinedload(Song.info))
                .order_by(Song.id)
                .paginate(page=page, per_page=per_page, error_out=False)
            )
        except SQLAlchemyError as e:
            raise self._store_error("list_page", e, "failed to read library") from e

        return CatalogPage(
            items=[CatalogEntry.model_validate(song.to_entry()) for song in pagination.items],
            pagination=Pagination(
                page=pagination.page,
                per_page=pagination.per_page,
                pages=pagination.pages,
                total=pagination.total or 0,
                has_next=pagination.has_next,
                has_prev=pagination.has_prev,
            ),
        )

    def find_metadata(self, group: str, title: str) -> Optional[EnrichmentResult]:
        """Look up metadata by natural key instead of id."""
        try:
            info = (
                SongInfo.query.join(SongInfo.owner)
                .filter(Song.music_group == group, Song.title == title)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._store_error("find_metadata", e, "failed to read song info") from e
        if info is None:
            return None
        return EnrichmentResult.model_validate(info.to_dict())


__all__ = ["CatalogStore", "MAX_PAGE_SIZE"]
