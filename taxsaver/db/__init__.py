"""Database package for the TaxSaver engine."""

from taxsaver.db.base import Base
from taxsaver.db.engine import get_sync_engine, get_sync_session_factory, init_db, SyncSessionLocal
from taxsaver.db.models import (
    CarryForwardRecord,
    HoldingRecord,
    RecommendationRecord,
    TaxConfigurationRecord,
    TransactionRecord,
)

__all__ = [
    "Base",
    "get_sync_engine",
    "get_sync_session_factory",
    "init_db",
    "SyncSessionLocal",
    "CarryForwardRecord",
    "HoldingRecord",
    "RecommendationRecord",
    "TaxConfigurationRecord",
    "TransactionRecord",
]
