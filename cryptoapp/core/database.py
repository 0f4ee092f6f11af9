import logging
import threading
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from cryptoapp.core.errors import ServiceUnavailable

logger = logging.getLogger(__name__)

# Base class for the models (User, Operation)
Base = declarative_base()

# Integer primary keys (Postgres INTEGER / SERIAL)
MAX_ROW_ID = 2**31 - 1


def is_row_id(value) -> bool:
    return isinstance(value, int) and 1 <= value <= MAX_ROW_ID


# What a sleeping / unreachable Postgres looks like from SQLAlchemy
STORE_DOWN_ERRORS = (OperationalError, InterfaceError, DisconnectionError)


class Database:
    """
    Handle on the backing store: engine, session factory and a "reachable" flag.

    One instance lives on app.state and is handed to the routers through
    get_database(); nothing in the package keeps it as a module global.
    """

    def __init__(self, url: str, pool_size: int = 10, max_overflow: int = 0, retry_after: int = 30):
        self.url = url
        self.retry_after = retry_after

        engine_kwargs = {"pool_pre_ping": True}
        connect_args = {}
        if url.startswith("sqlite"):
            # Only needed for SQLite, the session crosses the threadpool
            connect_args = {"check_same_thread": False}
        else:
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)

        self.engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
        self.SessionLocal = sessionmaker(autoflush=False, bind=self.engine)

        self._reachable = False
        self._lock = threading.Lock()

    @property
    def reachable(self) -> bool:
        return self._reachable

    def mark_reachable(self) -> None:
        with self._lock:
            if not self._reachable:
                logger.info("Database reachable")
            self._reachable = True

    def mark_unreachable(self, reason: str = "") -> None:
        with self._lock:
            if self._reachable:
                logger.warning("Database unreachable: %s", reason)
            self._reachable = False

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            self.mark_unreachable(str(exc))
            return False
        self.mark_reachable()
        return True

    def create_all(self) -> None:
        # Models must be imported so their tables are registered on Base
        from cryptoapp import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def guard(self):
        """Turn connection-level store failures into ServiceUnavailable."""
        try:
            yield
        except STORE_DOWN_ERRORS as exc:
            logger.error("Store call failed: %s", exc.__class__.__name__)
            self.mark_unreachable(str(exc))
            raise ServiceUnavailable(retry_after=self.retry_after) from exc
        self.mark_reachable()

    def dispose(self) -> None:
        self.engine.dispose()


class KeepAlive:
    """Background probe: pings the store every `interval` seconds, only flips the flag."""

    def __init__(self, database: Database, interval: float):
        self.database = database
        self.interval = interval
        self._stop = threading.Event()
        self._thread = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="db-keepalive", daemon=True)
        self._thread.start()
        logger.info("Keep-alive started (every %ss)", self.interval)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            if self.database.ping():
                logger.debug("Keep-alive ping sent")
            else:
                logger.warning("Keep-alive ping failed, database asleep")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None


# --- DEPENDENCIES ---

def get_database(request: Request) -> Database:
    return request.app.state.db


def get_db(request: Request):
    db = request.app.state.db.SessionLocal()
    try:
        yield db
    finally:
        db.close()
