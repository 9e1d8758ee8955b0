"""
SQLAlchemy ORM Database Configuration
SQLAlchemy manages connections internally with built-in pooling.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool


# Logger
from app.logging.utils import get_app_logger
logger = get_app_logger("app.connections.database")

# Settings
from app.config.settings import OMSConfigs
configs = OMSConfigs()


def normalize_database_url(url: str) -> str:
    """Route postgresql:// URLs to the psycopg3 driver."""
    if url and url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_engine(url: str, echo: bool = False) -> Engine:
    url = normalize_database_url(url)
    if url.startswith("sqlite"):
        # single shared connection so in-memory databases survive across sessions
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=10,           # Number of connections to maintain in pool
        max_overflow=20,        # Additional connections beyond pool_size
        pool_pre_ping=True,     # Validate connections before use
        pool_recycle=3600,      # Recycle connections after 1 hour
        echo=echo,
    )


# Base class for ORM models
Base = declarative_base()

engine = build_engine(configs.DATABASE_URL, echo=configs.DATABASE_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def get_db_session(session_factory: sessionmaker | None = None, read_only: bool = False) -> Generator[Session, None, None]:
    """
    Database session with transaction management.
    Commits when the block exits cleanly, rolls back on any exception.

    Args:
        session_factory: Optional sessionmaker; defaults to SessionLocal
        read_only: Skip the commit for read paths

    Yields:
        SQLAlchemy session object
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
        if not read_only:
            db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_tables(bind: Engine | None = None):
    # models must be imported so their tables are registered on Base.metadata
    import app.models.products  # noqa: F401
    import app.models.promotions  # noqa: F401
    import app.models.orders  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("database_tables_created")


def close_db_pool():
    engine.dispose()
