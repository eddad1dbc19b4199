"""
Database Connection Manager.

This module handles the low-level details of connecting to the database
(SQLite by default, PostgreSQL in deployments). It exposes the SQLModel
engine used by the SQL session repository.
"""

from sqlalchemy.engine import Engine
from sqlmodel import create_engine, SQLModel
from ...config import settings
from .tables import ChatSessionDBModel  # noqa: F401  registers the table on SQLModel.metadata


def build_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are written from the event loop thread and the API threadpool.
        connect_args["check_same_thread"] = False
    # echo=False in production to avoid leaking chat content in logs
    return create_engine(database_url, echo=False, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL)


def init_db(db_engine: Engine = engine):
    """
    Idempotent initialization.
    Creates tables if they do not exist.
    """
    SQLModel.metadata.create_all(db_engine)
