"""
Key/value persistence — the seam behind the cached-location record.

Two implementations of the same contract:

- ``InMemoryKeyValueStore``: process-local dict, used by tests and by
  hosts that do not want anything written to disk.
- ``SqlKeyValueStore``: one ``kv_store`` table through SQLAlchemy, so the
  record survives restarts.  SQLite file by default.

Key design decisions:
- Lazy engines: created on first use, not at construction time.
- Dual sync/async: the read happens synchronously when a resolver is
  created (the cached value is surfaced before the first await); writes
  happen from inside the event loop and go through the async engine.
- NullPool: every operation opens and closes its own connection.
- Overwrite-only: a write replaces the whole value; there is no partial
  update.
"""

from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, Iterator, Optional, Protocol

from sqlalchemy import Column, String, Text, create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

StoreBase = declarative_base()

# Sync dialect → async driver used for the write path
_ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
}


class KeyValueEntry(StoreBase):
    """Single persisted key/value row."""

    __tablename__ = "kv_store"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)


class KeyValueStore(Protocol):
    """Contract every persistence backend follows."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    async def aset(self, key: str, value: str) -> None:
        ...

    async def aclose(self) -> None:
        ...


class InMemoryKeyValueStore:
    """Dict-backed store; contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def aset(self, key: str, value: str) -> None:
        self.set(key, value)

    async def aclose(self) -> None:
        return None

    def __contains__(self, key: str) -> bool:
        return key in self._data


def async_url_for(url: str) -> str:
    """
    Derive the async driver URL from a sync one.

    ``sqlite:///data/cache.db`` → ``sqlite+aiosqlite:///data/cache.db``.
    A URL that already names a driver is returned unchanged.
    """
    parsed: URL = make_url(url)
    if "+" in parsed.drivername:
        return url
    driver = _ASYNC_DRIVERS.get(parsed.drivername)
    if driver is None:
        raise ValueError(
            f"No async driver known for '{parsed.drivername}'; "
            f"pass async_url explicitly"
        )
    return parsed.set(drivername=driver).render_as_string(hide_password=False)


class SqlKeyValueStore:
    """
    SQLAlchemy-backed store.

    Usage::

        store = SqlKeyValueStore("sqlite:///data/location_cache.db")
        store.get("last_known_location")                     # sync
        await store.aset("last_known_location", '{"latitude": 1.0, "longitude": 2.0}')
        await store.aclose()
    """

    def __init__(self, url: str, echo: bool = False, async_url: Optional[str] = None) -> None:
        self._url = url
        self._async_url = async_url or async_url_for(url)
        self._echo = echo

        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

        self._async_engine: Optional[AsyncEngine] = None
        self._async_session_factory: Optional[async_sessionmaker] = None
        self._async_schema_ready = False

    # ─────────────────────────────────────────────────────────────
    #  SYNC ENGINE (reads at resolver construction)
    # ─────────────────────────────────────────────────────────────

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._ensure_sqlite_directory()
            self._engine = create_engine(
                self._url, echo=self._echo, poolclass=NullPool,
            )
            StoreBase.metadata.create_all(self._engine)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session with auto-commit on success, rollback on error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ─────────────────────────────────────────────────────────────
    #  ASYNC ENGINE (writes from the event loop)
    # ─────────────────────────────────────────────────────────────

    @property
    def async_engine(self) -> AsyncEngine:
        if self._async_engine is None:
            self._ensure_sqlite_directory()
            self._async_engine = create_async_engine(
                self._async_url, echo=self._echo, poolclass=NullPool,
            )
        return self._async_engine

    @property
    def async_session_factory(self) -> async_sessionmaker:
        if self._async_session_factory is None:
            self._async_session_factory = async_sessionmaker(
                bind=self.async_engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._async_session_factory

    @asynccontextmanager
    async def async_session(self) -> AsyncIterator[AsyncSession]:
        """Async session with auto-commit on success, rollback on error."""
        if not self._async_schema_ready:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(StoreBase.metadata.create_all)
            self._async_schema_ready = True

        session = self.async_session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # ─────────────────────────────────────────────────────────────
    #  KEY / VALUE
    # ─────────────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[str]:
        with self.session() as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        with self.session() as session:
            session.merge(KeyValueEntry(key=key, value=value))

    async def aset(self, key: str, value: str) -> None:
        async with self.async_session() as session:
            await session.merge(KeyValueEntry(key=key, value=value))

    # ─────────────────────────────────────────────────────────────
    #  LIFECYCLE
    # ─────────────────────────────────────────────────────────────

    def close(self) -> None:
        """Dispose the sync engine (the async one needs ``aclose``)."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def aclose(self) -> None:
        """Dispose both engines."""
        if self._async_engine is not None:
            await self._async_engine.dispose()
            self._async_engine = None
            self._async_session_factory = None
            self._async_schema_ready = False
        self.close()

    def _ensure_sqlite_directory(self) -> None:
        """File-based SQLite needs its parent directory to exist."""
        url = make_url(self._url)
        if url.get_backend_name() != "sqlite":
            return
        database = url.database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
