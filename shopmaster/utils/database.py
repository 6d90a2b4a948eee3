"""
Database engine, session factory and declarative base
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from shopmaster.config import get_settings

Base = declarative_base()


def make_engine(url: str) -> Engine:
    """Create an engine; SQLite URLs are made usable from the request threadpool"""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


engine = make_engine(get_settings().database_url)
SessionLocal = make_session_factory(engine)


def create_tables(bind: Engine = None):
    # models must be imported so their tables are registered on Base.metadata
    import shopmaster.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind: Engine = None):
    import shopmaster.models  # noqa: F401
    Base.metadata.drop_all(bind=bind or engine)
