import contextlib
import logging
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from database.models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Owns the engine and session factory for one process.

    Built once at startup (web lifespan or CLI entry point), handed to the
    services that need it, and disposed on shutdown.
    """

    def __init__(self, url: str, engine: Optional[Engine] = None):
        self.url = url
        self.engine = engine or self._create_engine(url)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @staticmethod
    def _create_engine(url: str) -> Engine:
        if url.startswith("sqlite"):
            # In-memory SQLite must share one connection across sessions
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(
            url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=10,
            max_overflow=20
        )

    def session(self) -> Generator[Session, None, None]:
        """Yield a session that is always closed afterwards (no implicit commit)."""
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    @contextlib.contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        logger.info("Disposing database engine")
        self.engine.dispose()
