"""
In-process record store
"""
import logging
import threading
from typing import Dict, List, Optional, Tuple

from disaster_alert.db.base import RecordStore
from disaster_alert.models import AlertLevel, SOSEvent, UserRecord

logger = logging.getLogger(__name__)


class MemoryRecordStore(RecordStore):
    """
    Keeps users and SOS events in process memory.

    Sync request handlers run in a threadpool, so every read-modify-write goes
    through one lock.
    """

    backend = "memory"

    def __init__(self):
        self._users: Dict[str, UserRecord] = {}
        self._sos_events: List[SOSEvent] = []
        self._lock = threading.Lock()

    def upsert_user(
        self,
        phone: str,
        email: str,
        city: str,
        locality: str,
        full_address: str,
        timestamp: str,
    ) -> Tuple[UserRecord, bool]:
        with self._lock:
            existing = self._users.get(phone)
            if existing:
                record = existing.model_copy(update={
                    "email": email,
                    "city": city,
                    "locality": locality,
                    "full_address": full_address,
                    "timestamp": timestamp,
                })
                self._users[phone] = record
                logger.info(f"Updated user {phone}")
                return record, False

            record = UserRecord(
                phone=phone,
                email=email,
                city=city,
                locality=locality,
                full_address=full_address,
                alert_status=AlertLevel.green,
                timestamp=timestamp,
            )
            self._users[phone] = record
            logger.info(f"Created user {phone}")
            return record, True

    def get_user(self, phone: str) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(phone)

    def set_alert_status(self, phone: str, alert_status: AlertLevel) -> Optional[UserRecord]:
        with self._lock:
            existing = self._users.get(phone)
            if not existing:
                return None
            record = existing.model_copy(update={"alert_status": AlertLevel(alert_status)})
            self._users[phone] = record
            return record

    def add_sos_event(self, event: SOSEvent) -> SOSEvent:
        with self._lock:
            self._sos_events.append(event)
        return event

    def list_users(self) -> List[UserRecord]:
        with self._lock:
            return list(self._users.values())

    def list_sos_events(self) -> List[SOSEvent]:
        with self._lock:
            return list(self._sos_events)
