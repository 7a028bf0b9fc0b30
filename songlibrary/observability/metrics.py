from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

ADD_SONG_OUTCOMES = Counter(
    "songlibrary_add_song_total",
    "Add-song workflow runs by terminal state.",
    ["state"],
)
ENRICHMENT_REQUESTS = Counter(
    "songlibrary_enrichment_requests_total",
    "Outbound calls to the enrichment service by operation and outcome.",
    ["operation", "outcome"],
)
ENRICHMENT_LATENCY = Histogram(
    "songlibrary_enrichment_request_seconds",
    "Latency of outbound enrichment calls.",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, float("inf")),
)
STORE_ERRORS = Counter(
    "songlibrary_store_errors_total",
    "Catalog store operations that failed with a storage error.",
    ["operation"],
)


def record_add_song_outcome(state: str) -> None:
    ADD_SONG_OUTCOMES.labels(state=state).inc()


def record_enrichment_call(operation: str, outcome: str, duration_seconds: float) -> None:
    ENRICHMENT_REQUESTS.labels(operation=operation, outcome=outcome).inc()
    ENRICHMENT_LATENCY.labels(operation=operation).observe(duration_seconds)


def record_store_error(operation: str) -> None:
    STORE_ERRORS.labels(operation=operation).inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
