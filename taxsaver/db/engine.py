"""Database engine and session factory."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from taxsaver.settings import get_settings

_sync_engine = None


def get_sync_engine():
    """Get or create the database engine."""
    global _sync_engine
    if _sync_engine is None:
        settings = get_settings()
        _sync_engine = create_engine(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=True,
        )
    return _sync_engine


def get_sync_session_factory():
    return sessionmaker(bind=get_sync_engine(), expire_on_commit=False)


def init_db(engine=None) -> None:
    """Create all engine tables if they do not exist."""
    from taxsaver.db import models  # noqa: F401  (registers tables on Base.metadata)
    from taxsaver.db.base import Base

    Base.metadata.create_all(engine or get_sync_engine())


# Convenience alias
SyncSessionLocal = get_sync_session_factory
