from typing import Any, Dict

import structlog
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from tenacity import retry, stop_after_attempt, wait_exponential
from app.core.config import Settings, settings

logger = structlog.get_logger()


def build_engine(config: Settings) -> Engine:
    """Create the engine for the configured deployment target (SQLite or MySQL)"""
    kwargs: Dict[str, Any] = {
        "echo": config.db_echo_sql,
        "pool_pre_ping": True,
    }
    connect_args: Dict[str, Any] = {}

    if config.is_sqlite:
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = config.db_connect_timeout
    else:
        kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_timeout=config.db_pool_timeout,
            pool_recycle=1800,
        )
        connect_args["connect_timeout"] = config.db_connect_timeout
        if config.db_ssl_required:
            connect_args["ssl"] = {"ca": config.db_ssl_ca} if config.db_ssl_ca else {"check_hostname": False}

    db_engine = create_engine(config.database_url, connect_args=connect_args, **kwargs)

    if config.is_sqlite:
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)

    return db_engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = build_engine(settings)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db_session():
    """Get a database session for scripts and startup tasks"""
    return SessionLocal()


def _log_retry(retry_state):
    logger.warning(
        "Database not reachable, retrying",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()),
    )


def wait_for_database(db_engine: Engine, attempts: int) -> None:
    """Block until the database answers ``SELECT 1``, retrying transient failures"""

    @retry(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        before_sleep=_log_retry,
        reraise=True,
    )
    def _ping():
        with db_engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    _ping()
    logger.info("Database connection established", url=db_engine.url.render_as_string(hide_password=True))
