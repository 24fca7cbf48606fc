"""
core/database.py -- SQLAlchemy Core schema and engine factory.

Both stores (auth/store.py for users, messages/store.py for messages) share
one Engine built here, because the message listings join against users.
The lifespan in api/main.py creates the engine once and disposes it on
shutdown.

Schema notes:
  users.password_hash is the only column that holds credential material.
  Nothing outside UserStore.get_password_hash() selects it.

  messages.read_at is nullable and written once (see MessageStore.mark_read).

Layer rule: core/ is the kernel. No imports from api/, auth/, or messages/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("username", String(255), primary_key=True),
    Column("password_hash", Text, nullable=False),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("phone", String(50), nullable=False),
    Column("joined_at", String(32), nullable=False),
    Column("last_login_at", String(32)),
)

messages = Table(
    "messages",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("from_username", String(255), ForeignKey("users.username"), nullable=False),
    Column("to_username", String(255), ForeignKey("users.username"), nullable=False),
    Column("body", Text, nullable=False),
    Column("sent_at", String(32), nullable=False),
    Column("read_at", String(32)),
)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _configure_sqlite(dbapi_conn, connection_record) -> None:
    """Enable WAL and foreign keys on every new SQLite connection.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str) -> Engine:
    """Build an Engine for db_url and create any missing tables."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _configure_sqlite)
    metadata.create_all(engine)
    return engine


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
