"""Process-wide database engine and transactional sessions."""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import constants
from common.base.logging_config import get_logger
from common.config.blog_config import get_blog_config
from common.errors import BlogError
logger = get_logger(__name__)

class DatabaseError(Exception):
    """The database could not be opened."""
    pass

class Database:
    """Owns the engine for the life of the process.

    initialize() creates the engine and its connection pool once, every
    request borrows a connection through session(), and cleanup() releases
    the pool at shutdown. Sessions opened before initialize() initialize
    lazily.
    """

    def __init__(self):
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self.initialized = False

    @property
    def engine(self) -> Optional[Engine]:
        return self._engine

    def _database_url(self) -> str:
        if constants.TESTING:
            return constants._TEST_DB_PATH
        return get_blog_config().database_url or f'sqlite:///{constants._PROD_DB_PATH}'

    def _create_engine(self, url: str) -> Engine:
        if not url.startswith('sqlite'):
            return create_engine(url, pool_pre_ping=True)
        # waitress serves requests from a thread pool
        options = {'connect_args': {'check_same_thread': False}}
        if ':memory:' in url:
            # One shared connection, or each thread would see its own empty database
            options['poolclass'] = StaticPool
        return create_engine(url, **options)

    def _require_system(self, action: str) -> None:
        if not constants.INITIALIZED:
            raise DatabaseError(
                f"Cannot {action} before system initialization. "
                "Call either constants.init_testing() or constants.init_production()"
            )

    def initialize(self) -> bool:
        """
        Create the engine and any missing tables.

        :return: True once the database is ready, False if opening it failed
        :raises: DatabaseError if the system is not initialized
        """
        self._require_system("initialize database")
        if self.initialized:
            return True

        try:
            engine = self._create_engine(self._database_url())

            from models.models import Base
            Base.metadata.create_all(engine)
        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            return False

        self._engine = engine
        self._session_factory = sessionmaker(bind=engine)
        self.initialized = True
        logger.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}")
        return True

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Transactional scope: commit on success, roll back on any exception.

        Usage:
            with db.session() as db_session:
                blogs = list_blogs(db_session)

        :raises: DatabaseError if the database cannot be opened
        """
        self._require_system("open a database session")
        if not self.initialized and not self.initialize():
            raise DatabaseError("Database initialization failed")

        db_session = self._session_factory()
        try:
            yield db_session
            db_session.commit()
        except BlogError:
            # Expected outcomes such as NotFound are reported by the caller
            db_session.rollback()
            raise
        except Exception as e:
            db_session.rollback()
            logger.error(f"Session error: {str(e)}")
            raise
        finally:
            db_session.close()

    def cleanup(self) -> None:
        """Release the connection pool and forget the engine."""
        if self._engine is not None:
            self._engine.dispose()
            logger.debug("Database engine disposed")
        self._engine = None
        self._session_factory = None
        self.initialized = False

# Global database instance
db = Database()
