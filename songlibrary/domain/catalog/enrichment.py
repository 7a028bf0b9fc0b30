import logging
import time
from typing import Optional
from urllib.parse import urljoin

import requests
from pydantic import ValidationError

from songlibrary.models.dto import EnrichmentResult
from songlibrary.observability.metrics import record_enrichment_call

from .errors import DependencyError

logger = logging.getLogger(__name__)


class EnrichmentClient:
    def __init__(
        self,
        base_url: str,
        info_path: str = "/info",
        publish_path: str = "/songLibrary/ChangeInfo",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """Client for the external song metadata service.

        ``fetch`` is lenient: a non-200 answer means "no information" and
        yields an empty result. ``publish`` is strict: anything but 200 is an
        error. Both calls are bounded by ``timeout`` seconds.
        """
        self.base_url = base_url.rstrip("/") + "/"
        self.info_url = urljoin(self.base_url, info_path.lstrip("/"))
        self.publish_url = urljoin(self.base_url, publish_path.lstrip("/"))
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, group: str, title: str) -> EnrichmentResult:
        """Resolve (group, title) into release date, lyrics and link."""
        started = time.monotonic()
        try:
            resp = self.session.get(
                self.info_url,
                params={"group": group, "song": title},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            record_enrichment_call("fetch", "transport_error", time.monotonic() - started)
            logger.error("Enrichment lookup failed for %s - %s: %s", group, title, exc,
                         extra={"operation": "enrichment.fetch"})
            raise DependencyError("enrichment service unreachable", cause=exc) from exc

        elapsed = time.monotonic() - started
        if resp.status_code != requests.codes.ok:
            record_enrichment_call("fetch", "not_found", elapsed)
            logger.info("Enrichment service has no info for %s - %s (status %s)",
                        group, title, resp.status_code)
            return EnrichmentResult()

        try:
            payload = resp.json()
        except ValueError as exc:
            record_enrichment_call("fetch", "malformed", elapsed)
            logger.error("Enrichment service returned invalid JSON for %s - %s", group, title)
            raise DependencyError("malformed response from enrichment service", cause=exc) from exc
        if not isinstance(payload, dict):
            record_enrichment_call("fetch", "malformed", elapsed)
            raise DependencyError("malformed response from enrichment service")

        try:
            result = EnrichmentResult.model_validate(payload)
        except ValidationError as exc:
            record_enrichment_call("fetch", "malformed", elapsed)
            logger.error("Unexpected enrichment payload for %s - %s: %s", group, title, exc)
            raise DependencyError("malformed response from enrichment service", cause=exc) from exc

        record_enrichment_call("fetch", "ok", elapsed)
        logger.debug("Enrichment for %s - %s: release_date=%s", group, title, result.release_date)
        return result

    def publish(self, result: EnrichmentResult, song_id: int) -> None:
        """Send the fetched metadata back to the service, tagged with our id."""
        started = time.monotonic()
        try:
            resp = self.session.post(
                self.publish_url,
                params={"id": song_id},
                json=result.to_publish_wire(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            record_enrichment_call("publish", "transport_error", time.monotonic() - started)
            logger.error("Publishing info for song %s failed: %s", song_id, exc,
                         extra={"operation": "enrichment.publish"})
            raise DependencyError("enrichment service unreachable", cause=exc) from exc

        elapsed = time.monotonic() - started
        if resp.status_code != requests.codes.ok:
            record_enrichment_call("publish", "rejected", elapsed)
            logger.error("Enrichment service rejected info for song %s (status %s)",
                         song_id, resp.status_code, extra={"operation": "enrichment.publish"})
            raise DependencyError(
                f"enrichment service rejected song info: status {resp.status_code}"
            )

        record_enrichment_call("publish", "ok", elapsed)
        logger.info("Published info for song %s", song_id)

    def close(self) -> None:
        self.session.close()


__all__ = ["EnrichmentClient"]
