"""SQLAlchemy engine and session setup."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from taskline.config import CONFIG

Base = declarative_base()


def make_engine(url: Optional[str] = None) -> Engine:
    url = url or CONFIG["database_url"]
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True, pool_recycle=3600)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    # registers the tables on Base.metadata
    from taskline.adapters.storage import orm  # noqa: F401

    Base.metadata.create_all(bind=engine)
