"""SQLite engine for the evaluation store.

Weight tables, evaluation snapshots and daily view counters live in
$DATA_DIR/maas.db (default ~/.maas-evaluation). WAL mode keeps view counting
and history reads from blocking a weight-table activation.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = "~/.maas-evaluation"
DB_FILENAME = "maas.db"

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_db_path() -> Path:
    """Store file under $DATA_DIR, created on demand. Read per call so tests can repoint it."""
    data_dir = Path(os.path.expanduser(os.environ.get("DATA_DIR", DEFAULT_DATA_DIR)))
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILENAME


def _on_connect(dbapi_connection, connection_record):
    # busy_timeout covers concurrent view-count upserts from parallel tool calls
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the store engine, opened lazily on first use."""
    global _engine, _session_factory
    if _session_factory is None:
        _engine = create_async_engine(f"sqlite+aiosqlite:///{get_db_path()}", echo=False)
        event.listen(_engine.sync_engine, "connect", _on_connect)
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


async def init_db() -> Path:
    """Create the weight, evaluation, view-counter and meta tables if missing."""
    from .sqlmodels import Base

    get_session_factory()
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    path = get_db_path()
    logger.info("Evaluation store ready at %s", path)
    return path


async def close_db():
    """Dispose the engine so the next call reopens against the current $DATA_DIR."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
