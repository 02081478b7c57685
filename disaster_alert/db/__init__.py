"""
Record storage - in-memory or Google Sheets backed
"""
import logging

from disaster_alert.config import Settings
from disaster_alert.db.base import RecordStore, StoreError, StoreUnavailableError
from disaster_alert.db.memory import MemoryRecordStore

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> RecordStore:
    """Build the record store selected by STORAGE_BACKEND"""
    backend = settings.STORAGE_BACKEND.strip().lower()

    if backend == "sheets":
        # Imported lazily so the memory backend works without Google credentials libraries loaded
        from disaster_alert.db.sheets import SheetsRecordStore
        return SheetsRecordStore(settings)

    if backend != "memory":
        logger.warning(f"Unknown STORAGE_BACKEND '{settings.STORAGE_BACKEND}', using memory")
    return MemoryRecordStore()


__all__ = [
    "RecordStore",
    "StoreError",
    "StoreUnavailableError",
    "MemoryRecordStore",
    "create_store",
]
