"""
Database Configuration for DefiBuddy

Engine and session management for the search history, buddies and NFT
metadata tables. SQLite by default, PostgreSQL when DATABASE_URL says so.
"""

import os
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..models.database import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = 'sqlite:///./defibuddy.db'


class DatabaseConfig:
    """Lazily-initialized engine and session factory"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or os.getenv('DATABASE_URL', DEFAULT_DATABASE_URL)
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith('sqlite')

    def initialize_engine(self) -> None:
        """Create the engine once; later calls are no-ops"""
        if self.engine is not None:
            return

        if self.is_sqlite:
            # FastAPI runs sync endpoints in a threadpool
            self.engine = create_engine(
                self.database_url,
                connect_args={'check_same_thread': False},
                echo=os.getenv('SQL_ECHO', 'false').lower() == 'true'
            )
        else:
            self.engine = create_engine(
                self.database_url,
                pool_size=int(os.getenv('DB_POOL_SIZE', '5')),
                max_overflow=int(os.getenv('DB_MAX_OVERFLOW', '10')),
                pool_pre_ping=True,
                echo=os.getenv('SQL_ECHO', 'false').lower() == 'true'
            )

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"Database engine initialized (sqlite={self.is_sqlite})")

    def create_all_tables(self) -> None:
        self.initialize_engine()
        Base.metadata.create_all(bind=self.engine)

    def drop_all_tables(self) -> None:
        self.initialize_engine()
        Base.metadata.drop_all(bind=self.engine)

    def get_session(self) -> Session:
        if self.SessionLocal is None:
            self.initialize_engine()
        return self.SessionLocal()

    @contextmanager
    def get_session_context(self) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on error"""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def test_connection(self) -> bool:
        """Run SELECT 1; False on any failure"""
        try:
            self.initialize_engine()
            with self.engine.connect() as conn:
                conn.execute(text('SELECT 1'))
            return True
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False


db_config = DatabaseConfig()


def get_database_session() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session"""
    session = db_config.get_session()
    try:
        yield session
    finally:
        session.close()
