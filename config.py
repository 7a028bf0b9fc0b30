#!/usr/bin/env python
# config.py
import os
from typing import List, Optional
from urllib.parse import quote_plus

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))

ENV_LOCAL = "local"
ENV_DEV = "dev"
ENV_PROD = "prod"


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


def _get_env_name(name: str, default: str = ENV_LOCAL) -> str:
    value = (os.getenv(name) or default).strip().lower()
    if value not in {ENV_LOCAL, ENV_DEV, ENV_PROD}:
        return default
    return value


def build_database_uri() -> str:
    """Resolve the SQLAlchemy URL.

    ``DATABASE_URL`` wins. Otherwise a Postgres URL is assembled from the
    ``DB_*`` descriptor when ``DB_HOST`` is set, and a local SQLite file is
    used as the last resort.
    """
    explicit: Optional[str] = os.environ.get('DATABASE_URL')
    if explicit:
        return explicit

    host = os.environ.get('DB_HOST')
    if host:
        user = quote_plus(os.environ.get('DB_USER', 'postgres'))
        password = quote_plus(os.environ.get('DB_PASSWORD', 'postgres'))
        port = _get_int('DB_PORT', 5432)
        name = os.environ.get('DB_NAME', 'songLibrary')
        return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"

    return 'sqlite:///' + os.path.join(basedir, 'instance', 'songlibrary.db')


class Config:
    # Runtime environment: selects log format and verbosity
    APP_ENV = _get_env_name('APP_ENV')

    # Database
    SQLALCHEMY_DATABASE_URI = build_database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Optional SQL bootstrap script executed after tables are created
    INIT_PATH = os.getenv('INIT_PATH')

    # HTTP server
    HTTP_HOST = os.getenv('HTTP_HOST', '0.0.0.0')
    HTTP_PORT = _get_int('HTTP_PORT', 8080)
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')

    # External enrichment service
    ENRICHMENT_BASE_URL = os.getenv('ENRICHMENT_BASE_URL', 'http://0.0.0.0:8081')
    ENRICHMENT_INFO_PATH = os.getenv('ENRICHMENT_INFO_PATH', '/info')
    ENRICHMENT_PUBLISH_PATH = os.getenv('ENRICHMENT_PUBLISH_PATH', '/songLibrary/ChangeInfo')
    ENRICHMENT_TIMEOUT_SECONDS = _get_float('ENRICHMENT_TIMEOUT_SECONDS', 10.0)

    # Listing
    LIBRARY_PAGE_SIZE = max(1, min(100, _get_int('LIBRARY_PAGE_SIZE', 20)))

    # Logging
    DEBUG = _get_bool('DEBUG', False)
    LOG_DIR = os.getenv('LOG_DIR')
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', True)
