from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def build_engine(database_url: str):
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}  # needed for SQLite + FastAPI
        if url.database in (None, "", ":memory:"):
            # in-memory DB lives in one connection; share it across threads
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
    )


class Store:
    """Connection pool plus session factory for the links table.

    One instance per application, handed to request handlers through
    ``app.state.store``.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = build_engine(database_url)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        # models must be imported so the table is registered on Base.metadata
        from tinylink import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.store.session()
    try:
        yield db
    finally:
        db.close()
