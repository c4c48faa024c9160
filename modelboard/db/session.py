"""Engine helpers for the SQL-backed board.

Synchronous SQLAlchemy: board calls are plain blocking calls.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection."""
    kwargs: dict = {"pool_pre_ping": True}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs = {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return create_engine(database_url, **kwargs)
