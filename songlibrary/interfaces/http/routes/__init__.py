"""Route blueprints exposed via Flask."""

from .songs import song_bp
from .health import health_bp

__all__ = [
    "song_bp",
    "health_bp",
]
