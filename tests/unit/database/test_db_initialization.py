import os
from pathlib import Path

import pytest
from flask import Flask

_INIT_SQL = Path(__file__).resolve().parents[3] / "scripts" / "init.sql"


def _bare_app(uri, instance_dir=None, init_path=None):
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["INIT_PATH"] = init_path
    if instance_dir is not None:
        app.instance_path = str(instance_dir)
    return app


@pytest.mark.unit
def test_initialize_database_creates_sqlite_directory(tmp_path):
    from songlibrary.database.db_manager import Song, db, initialize_database

    target_dir = tmp_path / "nested" / "dbdir"
    uri = f"sqlite:///{(target_dir / 'test.db').as_posix()}"
    app = _bare_app(uri, instance_dir=tmp_path / "instance")

    initialize_database(app)

    assert target_dir.exists()
    with app.app_context():
        assert db.session.query(Song).count() == 0


@pytest.mark.unit
def test_initialize_database_in_memory_only_creates_instance_dir(tmp_path, monkeypatch):
    from songlibrary.database.db_manager import initialize_database

    instance_dir = tmp_path / "instance"
    app = _bare_app("sqlite:///:memory:", instance_dir=instance_dir)

    calls = []
    real_makedirs = os.makedirs

    def tracing_makedirs(path, *args, **kwargs):
        calls.append(os.path.abspath(path))
        return real_makedirs(path, *args, **kwargs)

    monkeypatch.setattr(os, "makedirs", tracing_makedirs)

    initialize_database(app)

    assert instance_dir.exists()
    assert calls == [os.path.abspath(str(instance_dir))]


@pytest.mark.unit
def test_init_script_seeds_catalog_and_is_rerunnable(tmp_path):
    from songlibrary.database.db_manager import Song, SongInfo, db, initialize_database, run_init_script

    uri = f"sqlite:///{(tmp_path / 'seed.db').as_posix()}"
    app = _bare_app(uri, instance_dir=tmp_path / "instance", init_path=str(_INIT_SQL))

    initialize_database(app)

    with app.app_context():
        songs = Song.query.order_by(Song.id).all()
        assert [(s.music_group, s.title) for s in songs] == [
            ("Muse", "Supermassive Black Hole"),
            ("Queen", "Bohemian Rhapsody"),
        ]
        assert SongInfo.query.count() == 2
        assert songs[1].info.text.startswith("Is this the real life?\n")

        assert run_init_script(str(_INIT_SQL)) is True
        assert Song.query.count() == 2
        db.session.remove()


@pytest.mark.unit
def test_init_script_missing_or_empty_is_skipped(app_context, tmp_path):
    from songlibrary.database.db_manager import run_init_script

    empty = tmp_path / "empty.sql"
    empty.write_text("   \n", encoding="utf-8")

    assert run_init_script(None) is False
    assert run_init_script(str(tmp_path / "missing.sql")) is False
    assert run_init_script(str(empty)) is False


@pytest.mark.unit
def test_init_script_sql_errors_propagate(app_context, tmp_path):
    import sqlite3

    from songlibrary.database.db_manager import run_init_script

    bad = tmp_path / "bad.sql"
    bad.write_text("INSERT INTO no_such_table VALUES (1);", encoding="utf-8")

    with pytest.raises(sqlite3.OperationalError):
        run_init_script(str(bad))
