# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    record_add_song_outcome,
    record_enrichment_call,
    record_store_error,
)
