"""
Store Connection Management.

This module owns the SQLAlchemy engine behind the ordered key-value store.
It provides:
- Engine and session factory creation
- Explicit open/close lifecycle (startup creates the schema, shutdown
  disposes the pool)
- Health checks

The connection is created once by the application lifespan and handed to
the store adapter; nothing in the request path reaches for a global handle.
"""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import StorageError
from src.core.logging_config import get_logger
from src.database.models import Base

logger = get_logger(__name__)


class StoreConnection:
    """
    Manages the store engine and session lifecycle.
    
    Example:
        >>> conn = StoreConnection("sqlite:///./survey.db")
        >>> conn.open()
        >>> with conn.get_session() as session:
        ...     session.execute(text("SELECT 1"))
        >>> conn.close()
    """
    
    def __init__(self, connection_url: str):
        """
        Initialize the engine. No connection is made until first use.
        
        Args:
            connection_url: SQLAlchemy database URL
        """
        self.url = connection_url
        
        engine_kwargs = {"pool_pre_ping": True, "echo": False}
        if connection_url.startswith("sqlite"):
            # Requests are served from a thread pool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs["pool_size"] = 5
            engine_kwargs["max_overflow"] = 10
        
        self.engine = create_engine(connection_url, **engine_kwargs)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info(f"Store engine created: {self._display_url()}")
    
    def _display_url(self) -> str:
        """Connection URL without credentials, for logging."""
        return self.url.split("@")[-1] if "@" in self.url else self.url
    
    def open(self) -> None:
        """
        Create the key-value table if it does not exist.
        
        Raises:
            StorageError: If the store is unreachable
        """
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to open store at {self._display_url()}: {e}")
            raise StorageError(str(e)) from e
        logger.info("Store opened")
    
    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a session with automatic cleanup.
        
        The transaction is committed when the block exits normally and
        rolled back on a database error.
        
        Yields:
            SQLAlchemy Session object
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Store error, rolling back: {e}")
            raise
        finally:
            session.close()
    
    def check_connection(self) -> bool:
        """
        Test store connectivity.
        
        Returns:
            True if connection is healthy, False otherwise.
        """
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
            logger.debug("Store connection check: OK")
            return True
        except SQLAlchemyError as e:
            logger.error(f"Store connection check failed: {e}")
            return False
    
    def close(self) -> None:
        """Close all connections in the pool."""
        self.engine.dispose()
        logger.info("Store connections closed")
