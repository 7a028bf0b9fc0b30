import os
import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, jsonify, g
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

# --- Import our configuration and the catalog services ---
from config import Config
from songlibrary.database.db_manager import initialize_database
from songlibrary.domain.catalog import AddSongWorkflow, CatalogStore, EnrichmentClient
from songlibrary.interfaces.http.responses import error_body, internal_server
from songlibrary.interfaces.http.routes import song_bp, health_bp
from songlibrary.observability import configure_structured_logging, metrics_blueprint


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is on
      - Werkzeug/Flask loggers routed to root (no extra console spam)

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_filename = f"log-{timestamp}"
    log_path = os.path.join(log_dir, log_filename)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # File: INFO and above
    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        # If console logging is enabled, keep it concise: warnings and above
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # Quiet Flask/Werkzeug own console handlers; let them propagate to root
    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def build_enrichment_client(app: Flask) -> EnrichmentClient:
    return EnrichmentClient(
        base_url=app.config['ENRICHMENT_BASE_URL'],
        info_path=app.config['ENRICHMENT_INFO_PATH'],
        publish_path=app.config['ENRICHMENT_PUBLISH_PATH'],
        timeout=float(app.config['ENRICHMENT_TIMEOUT_SECONDS']),
    )


def create_app(config_overrides: Optional[dict] = None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    configure_structured_logging(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config.get('CORS_ALLOWED_ORIGINS', [])
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(app, resources={r"/api/*": {"origins": allowed_origins}})

    # Every failure path answers with a JSON body, including Flask's own 404/405
    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify(error_body(exc.name, exc.description or exc.name)), exc.code

    @app.errorhandler(Exception)
    def _unhandled_error(exc: Exception):
        logger.error("Unhandled error on %s %s: %s", request.method, request.path, exc, exc_info=True)
        return jsonify(internal_server("unexpected error")), 500

    # Initialize database
    initialize_database(app)

    # Build domain services once; handlers reach them through app.extensions
    enrichment_client = build_enrichment_client(app)
    catalog_store = CatalogStore(page_size=int(app.config['LIBRARY_PAGE_SIZE']))
    app.extensions['enrichment_client'] = enrichment_client
    app.extensions['catalog_store'] = catalog_store
    app.extensions['add_song_workflow'] = AddSongWorkflow(store=catalog_store, enrichment=enrichment_client)
    app.logger.info(
        "Enrichment client ready: base_url=%s, timeout=%ss",
        enrichment_client.base_url,
        enrichment_client.timeout,
    )

    # --- Register Blueprints ---
    app.register_blueprint(song_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    return app

if __name__ == '__main__':
    if Config.LOG_DIR:
        log_file_path = configure_logging(Config.LOG_DIR)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.propagate = True
    logger.info("Starting song library API (env=%s) on %s:%s", Config.APP_ENV, Config.HTTP_HOST, Config.HTTP_PORT)
    app.run(debug=Config.DEBUG, host=Config.HTTP_HOST, port=Config.HTTP_PORT, threaded=True)
