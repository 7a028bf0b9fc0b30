# songlibrary/database/db_manager.py
import logging
import os
import sqlite3
from datetime import datetime
from typing import Optional

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import ForeignKey, UniqueConstraint, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import relationship

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Song(db.Model):
    __tablename__ = 'songs'

    id = db.Column(db.Integer, primary_key=True)
    music_group = db.Column(db.String(255), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    info = relationship(
        'SongInfo',
        back_populates='owner',
        uselist=False,
        cascade='all, delete-orphan',
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint('music_group', 'title', name='uq_songs_group_title'),
    )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'group': self.music_group,
            'song': self.title,
        }

    def to_entry(self) -> dict:
        """Join projection of the song and its metadata row."""
        data = self.to_dict()
        data.update(self.info.to_dict() if self.info else SongInfo.empty_dict())
        return data

    def __repr__(self) -> str:
        return f'<Song {self.id}: {self.music_group} - {self.title}>'


class SongInfo(db.Model):
    __tablename__ = 'song_info'

    id = db.Column(db.Integer, primary_key=True)
    song_id = db.Column(
        db.Integer,
        ForeignKey('songs.id', ondelete='CASCADE'),
        nullable=False,
        unique=True,
        index=True,
    )
    release_date = db.Column(db.Date, nullable=True)
    text = db.Column(db.Text, nullable=True)
    link = db.Column(db.String(500), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = relationship('Song', back_populates='info')

    @staticmethod
    def empty_dict() -> dict:
        return {'releaseDate': None, 'text': None, 'link': None}

    def to_dict(self) -> dict:
        return {
            'releaseDate': self.release_date.isoformat() if self.release_date else None,
            'text': self.text,
            'link': self.link,
        }

    def __repr__(self) -> str:
        return f'<SongInfo song_id={self.song_id}>'


def run_init_script(path: Optional[str]) -> bool:
    """Execute a SQL bootstrap script against the bound engine.

    Must be called inside an application context. Returns False when no
    script is configured or the file cannot be read; SQL errors propagate.
    """
    if not path:
        logger.debug("No INIT_PATH configured; skipping SQL bootstrap")
        return False
    try:
        with open(path, 'r', encoding='utf-8') as f:
            script = f.read()
    except OSError as e:
        logger.error("Could not read init script %s: %s", path, e)
        return False

    if not script.strip():
        logger.info("Init script %s is empty; nothing to execute", path)
        return False

    engine = db.engine
    if engine.dialect.name == 'sqlite':
        # sqlite3 refuses multiple statements through execute()
        raw = engine.raw_connection()
        try:
            raw.driver_connection.executescript(script)
            raw.commit()
        finally:
            raw.close()
    else:
        with engine.begin() as conn:
            conn.exec_driver_sql(script)

    logger.info("Executed init script %s", path)
    return True


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance,
    creates all database tables if they don't already exist and runs the
    optional INIT_PATH bootstrap script.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    # Create database tables within the application context
    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
        run_init_script(app.config.get('INIT_PATH'))
