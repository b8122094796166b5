# battery_scm/database.py

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from .config import settings


def build_engine(url: str):
    """
    Create an engine for the given URL.

    In-memory sqlite needs a single shared connection, otherwise every
    pooled connection would see its own empty database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url)


engine = build_engine(settings.database_url)


def create_db_and_tables(bind=None) -> None:
    # table classes must be imported before create_all
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
