"""Database handle and session scoping.

The handle is created explicitly and passed to whatever needs it (the
FastAPI app state, the CLI), rather than living in a module global.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fleetops.utils.config import DatabaseConfig
from fleetops.utils.logger import get_logger

from .models import Base

logger = get_logger(__name__)


class Database:
    """Engine plus session factory for one configured database.

    Args:
        config: Database configuration (URL and echo flag).
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self.config = config
        kwargs: dict = {"echo": config.echo}
        if config.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in config.url or config.url == "sqlite://":
                # One shared connection, otherwise every session sees an empty db
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(config.url, **kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    def create_all(self) -> None:
        """Create any missing tables."""
        Base.metadata.create_all(self.engine)
        logger.info("Database schema ready at %s", self.engine.url)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
