"""Engine and session wiring for the read-only catalog datastore."""

from collections.abc import Generator
from pathlib import Path

from loguru import logger
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .core.config import settings

POSTGRES_KEEPALIVES: dict[str, object] = {
    "keepalives": 1,
    "keepalives_idle": 120,
    "keepalives_interval": 30,
    "keepalives_count": 5,
}


def _sqlite_options(url: URL) -> dict[str, object]:
    options: dict[str, object] = {"connect_args": {"check_same_thread": False}}
    database = url.database
    if not database or database == ":memory:":
        # In-memory databases must share a single connection.
        options["poolclass"] = StaticPool
        return options
    Path(database).parent.mkdir(parents=True, exist_ok=True)
    return options


def _postgres_options(url: URL) -> dict[str, object]:
    connect_args = dict(POSTGRES_KEEPALIVES)
    # PgBouncer's transaction pooler rejects PREPARE.
    if url.get_driver_name() == "psycopg":
        connect_args["prepare_threshold"] = None
    # Supabase/PgBouncer drop idle connections; recycle before they do.
    return {"connect_args": connect_args, "pool_recycle": 300, "pool_pre_ping": True}


def create_catalog_engine(url: str, *, echo: bool = False) -> Engine:
    parsed = make_url(url)
    backend = parsed.get_backend_name()
    if backend == "sqlite":
        options = _sqlite_options(parsed)
    elif backend.startswith("postgresql"):
        options = _postgres_options(parsed)
    else:
        options = {"pool_pre_ping": True}
    logger.debug("Creating {} engine for catalog datastore", backend)
    return create_engine(parsed, echo=echo, future=True, **options)


def create_session_factory(bind: Engine) -> sessionmaker[Session]:
    # Sessions only read; nothing is flushed back to the catalog.
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False, future=True)


engine = create_catalog_engine(settings.resolved_database_url, echo=settings.debug)
SessionLocal = create_session_factory(engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db(bind: Engine | None = None) -> None:
    from . import models  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("Catalog tables ready on {}", target.url.render_as_string(hide_password=True))
