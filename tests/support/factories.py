"""Factory Boy factories for database models used in tests."""

from datetime import date

import factory
from factory.alchemy import SQLAlchemyModelFactory

from songlibrary.database.db_manager import Song, SongInfo


class _BaseFactory(SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session = None
        sqlalchemy_session_persistence = "flush"


class SongFactory(_BaseFactory):
    class Meta:
        model = Song

    music_group = factory.Sequence(lambda n: f"Group {n}")
    title = factory.Sequence(lambda n: f"Song {n}")
    info = factory.RelatedFactory("tests.support.factories.SongInfoFactory", factory_related_name="owner")


class SongInfoFactory(_BaseFactory):
    class Meta:
        model = SongInfo

    release_date = date(2006, 7, 16)
    text = factory.Sequence(lambda n: f"Verse {n}\n\nChorus {n}")
    link = factory.Sequence(lambda n: f"https://www.youtube.com/watch?v=song{n}")
    owner = factory.SubFactory(SongFactory, info=None)


_FACTORIES = [SongFactory, SongInfoFactory]


def set_session(session):
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = session


def reset_session():
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = None


__all__ = [
    "SongFactory",
    "SongInfoFactory",
    "set_session",
    "reset_session",
]
