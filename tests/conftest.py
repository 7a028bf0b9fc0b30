import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'songlibrary' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support import stubs as test_stubs


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path_factory):
    """Ensure a clean env for tests with per-test sqlite files."""
    db_dir = tmp_path_factory.mktemp("db")
    db_path = Path(db_dir) / "test.sqlite"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.delenv("INIT_PATH", raising=False)
    monkeypatch.delenv("DB_HOST", raising=False)
    yield db_path


@pytest.fixture
def enrichment_stub():
    return test_stubs.EnrichmentClientStub()


@pytest.fixture
def app(_isolate_env, enrichment_stub):
    import app as app_module
    from songlibrary.domain.catalog import AddSongWorkflow

    application = app_module.create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{_isolate_env.as_posix()}",
            "INIT_PATH": None,
            "ENABLE_CONSOLE_LOGS": False,
        }
    )
    # Swap the outbound client for a stub; the store stays real
    application.extensions['enrichment_client'] = enrichment_stub
    application.extensions['add_song_workflow'] = AddSongWorkflow(
        store=application.extensions['catalog_store'],
        enrichment=enrichment_stub,
    )
    yield application


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from songlibrary.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        try:
            db.session.rollback()
        except Exception:
            pass
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def store(app_context):
    return app_context.extensions['catalog_store']


@pytest.fixture
def client(app):
    return app.test_client()
