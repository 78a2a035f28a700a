from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from gigboard.core.config import get_settings
from gigboard.core.errors import TransientError

logger = logging.getLogger(__name__)

WRITE_INTENT = "gigboard_write_intent"


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    # let SQLAlchemy emit BEGIN itself (see _sqlite_begin)
    dbapi_conn.isolation_level = None
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _enable_wal(dbapi_conn, connection_record):
    # persistent per database file; readers then never block the writer
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def _sqlite_begin(conn):
    # Write scopes take the write lock up front: concurrent writers then
    # queue on the busy timeout instead of failing later on a stale snapshot.
    if conn.get_execution_options().get(WRITE_INTENT):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
    else:
        conn.exec_driver_sql("BEGIN")


def configure_sqlite(engine: Engine) -> Engine:
    event.listen(engine, "first_connect", _enable_wal)
    event.listen(engine, "connect", _set_sqlite_pragmas)
    event.listen(engine, "begin", _sqlite_begin)
    return engine


def build_engine(database_url: str, *, echo: bool = False, lock_timeout_ms: int = 30000) -> Engine:
    if database_url.startswith("sqlite"):
        # a writer queued on BEGIN IMMEDIATE gives up after lock_timeout_ms
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": lock_timeout_ms / 1000.0},
        )
        return configure_sqlite(engine)

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
    )


settings = get_settings()

engine = build_engine(
    settings.database_url,
    echo=settings.db_echo,
    lock_timeout_ms=settings.hire_timeout_ms,
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------------------------------------------------------------------
# transactional scope
# ---------------------------------------------------------------------


def _apply_timeout(db: Session, timeout_ms: int) -> None:
    if db.get_bind().dialect.name != "postgresql":
        return
    ms = int(timeout_ms)
    db.execute(text(f"SET LOCAL lock_timeout = {ms}"))
    db.execute(text(f"SET LOCAL statement_timeout = {ms}"))


@contextmanager
def atomic(db: Session, *, timeout_ms: Optional[int] = None) -> Iterator[Session]:
    """
    All-or-nothing scope over every mutation made through `db`.

    - commits when the block exits normally
    - rolls back on any exception and re-raises it
    - integrity violations propagate as IntegrityError for the caller to
      translate; any other storage fault becomes TransientError
    - with timeout_ms, the scope is aborted as TransientError once the
      deadline passes (PostgreSQL also enforces it per statement/lock)
    """
    if db.in_transaction():
        # start from a clean boundary so nothing read earlier leaks in
        db.commit()

    started = time.monotonic()
    try:
        db.connection(execution_options={WRITE_INTENT: True})
        if timeout_ms:
            _apply_timeout(db, timeout_ms)
        yield db
        if timeout_ms and (time.monotonic() - started) * 1000.0 > timeout_ms:
            raise TransientError("The operation timed out and was rolled back. Please retry.")
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except DBAPIError as e:
        db.rollback()
        logger.warning("transaction aborted by storage", extra={"error": str(e.orig)})
        raise TransientError() from e
    except BaseException:
        db.rollback()
        raise
