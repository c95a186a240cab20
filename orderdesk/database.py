# orderdesk/database.py
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from orderdesk.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Database connection
#
# - SQLite (default, local dev / tests):
#     check_same_thread=False so pooled connections can be
#     used by FastAPI's threadpool workers.
# - PostgreSQL:
#     sslmode=require     : enforce SSL when running in the cloud
#     pool_pre_ping=True  : validate connections before using them
#     Local hosts are left without sslmode.
# ---------------------------------------------------------


def _with_sslmode(db_url: str) -> str:
    """Append sslmode=require to remote Postgres URLs if not already present."""
    if "sslmode=" in db_url:
        return db_url
    if "@localhost" in db_url or "@127.0.0.1" in db_url:
        return db_url
    if "?" in db_url:
        return db_url + "&sslmode=require"
    return db_url + "?sslmode=require"


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """
    Create an engine with per-backend connection options.
    """
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        _with_sslmode(db_url),
        echo=echo,  # set to True if you want to debug SQL queries
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
