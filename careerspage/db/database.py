# careerspage/db/database.py

import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from careerspage.db.models import Base, StorageBucket

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Creates the SQLAlchemy engine for the configured database."""
    connect_args = {}
    engine_kwargs = {}
    if database_url.startswith("sqlite"):
        # Needed for SQLite with FastAPI's threadpool request handling
        connect_args["check_same_thread"] = False
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_pre_ping"] = True

    return create_engine(database_url, connect_args=connect_args, **engine_kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine, session_factory: sessionmaker, bucket_name: str) -> None:
    """Creates missing tables and makes sure the public asset bucket exists."""
    Base.metadata.create_all(bind=engine)
    db = session_factory()
    try:
        if db.get(StorageBucket, bucket_name) is None:
            db.add(StorageBucket(name=bucket_name, public=True))
            db.commit()
            logger.info(f"INIT: Created storage bucket '{bucket_name}'.")
    finally:
        db.close()


# Dependency to get a database session
def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
