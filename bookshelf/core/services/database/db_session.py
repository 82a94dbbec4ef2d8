"""Database engine and session factory used across the application."""

from typing import Any

from loguru import logger
from sqlalchemy import Engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from bookshelf.runtime.config.config_data import DatabaseConfig
from bookshelf.runtime.context import get_config


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DbSessionService:
    """Owns the shared engine (and therefore the one connection pool)."""

    def __init__(
        self, db_config: DatabaseConfig | None = None, engine: Engine | None = None
    ):
        if engine is None:
            engine = self._create_engine(db_config or get_config().database)
        self._engine = engine

        if engine.dialect.name == "sqlite":
            enable_sqlite_foreign_keys(engine)

    @staticmethod
    def _create_engine(db_config: DatabaseConfig) -> Engine:
        logger.info("Setting up database engine and session factory")
        url = make_url(db_config.connection_string)

        engine_kwargs: dict[str, Any] = {
            "echo": False,
            "echo_pool": False,
            "pool_pre_ping": True,  # Validate connections before use
        }

        if url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,  # Sessions run on worker threads
                "timeout": 20,  # Lock timeout
            }
            if url.database in (None, "", ":memory:"):
                # One shared connection, otherwise each checkout is a new empty DB
                engine_kwargs["poolclass"] = StaticPool
            else:
                engine_kwargs.update(
                    pool_size=db_config.pool_size,
                    max_overflow=db_config.max_overflow,
                    pool_timeout=db_config.pool_timeout,
                )
        else:
            engine_kwargs.update(
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
                pool_timeout=db_config.pool_timeout,
                pool_recycle=db_config.pool_recycle,
            )
            if url.get_backend_name() == "postgresql":
                engine_kwargs["connect_args"] = {
                    "application_name": "bookshelf",
                    "connect_timeout": 30,
                }

        logger.info(
            "Initializing {} engine for {}",
            url.get_backend_name(),
            url.render_as_string(hide_password=True),
        )
        return create_engine(url, **engine_kwargs)

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Entities are read after commit
            autoflush=True,
        )

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error("Database health check failed: {}: {}", type(e).__name__, e)
            return False

    def dispose(self) -> None:
        """Close every pooled connection."""
        self._engine.dispose()
        logger.info("Database connection pool disposed")
