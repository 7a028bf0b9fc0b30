#!/usr/bin/env python
"""
Pydantic DTOs for the song catalog API and the enrichment service payloads.

Field aliases keep the JSON wire names (``group``, ``song``, ``releaseDate``)
while the Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y")


def parse_release_date(value: Any) -> Optional[date]:
    """Accept ISO dates, ISO/RFC 3339 datetimes and ``DD.MM.YYYY``."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"unsupported releaseDate value: {value!r}")
    raw = value.strip()
    if not raw:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"unrecognized releaseDate format: {value!r}") from None


class SongRequest(BaseModel):
    """Natural key of a song as submitted by clients."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    group: str = Field(min_length=1, max_length=255)
    title: str = Field(
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("song", "title"),
        serialization_alias="song",
    )


class EnrichmentResult(BaseModel):
    """Metadata as returned by the enrichment service or stored for a song."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    release_date: Optional[date] = Field(default=None, alias="releaseDate")
    text: Optional[str] = None
    link: Optional[str] = None

    @field_validator("release_date", mode="before")
    @classmethod
    def normalize_release_date(cls, value: Any) -> Optional[date]:
        return parse_release_date(value)

    @property
    def recognized(self) -> bool:
        # The enrichment service omits releaseDate for songs it does not know
        return self.release_date is not None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def to_publish_wire(self) -> dict:
        """Body for the enrichment service's confirmation endpoint.

        That endpoint decodes ``releaseDate`` as an RFC 3339 timestamp, so the
        date is sent as midnight UTC.
        """
        body = self.to_wire()
        if self.release_date is not None:
            body["releaseDate"] = f"{self.release_date.isoformat()}T00:00:00Z"
        return body


class SongInfoPatch(EnrichmentResult):
    """Partial metadata update; only fields present in the body are applied."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def changes(self) -> dict:
        """Fields explicitly set to a non-null value, keyed by attribute name."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class CatalogEntry(BaseModel):
    """Read model joining a song with its metadata."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    group: str
    title: str = Field(alias="song")
    release_date: Optional[date] = Field(default=None, alias="releaseDate")
    text: Optional[str] = None
    link: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Pagination(BaseModel):
    page: int
    per_page: int
    pages: int
    total: int
    has_next: bool
    has_prev: bool


class CatalogPage(BaseModel):
    items: List[CatalogEntry]
    pagination: Pagination

    def to_wire(self) -> dict:
        return {
            "items": [entry.to_wire() for entry in self.items],
            "pagination": self.pagination.model_dump(),
        }


__all__ = [
    "SongRequest",
    "EnrichmentResult",
    "SongInfoPatch",
    "CatalogEntry",
    "Pagination",
    "CatalogPage",
    "parse_release_date",
]
