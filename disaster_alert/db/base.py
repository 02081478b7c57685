"""
Record store interface shared by the in-memory and spreadsheet backends
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from disaster_alert.models import AlertLevel, SOSEvent, UserRecord


class StoreError(Exception):
    """Raised when the backing storage cannot complete an operation"""


class StoreUnavailableError(StoreError):
    """Raised when the backing storage has not been initialized"""


class RecordStore(ABC):
    """
    Holds user profile rows and SOS event rows.

    Users are keyed by phone: an upsert for a known phone updates the row in
    place. SOS events are append-only. All writes are last-write-wins.
    """

    backend: str = "base"

    @property
    def ready(self) -> bool:
        return True

    def initialize(self) -> None:
        """Prepare the backing storage. Backends that need no setup do nothing."""

    @abstractmethod
    def upsert_user(
        self,
        phone: str,
        email: str,
        city: str,
        locality: str,
        full_address: str,
        timestamp: str,
    ) -> Tuple[UserRecord, bool]:
        """Create or update a user. Returns the record and whether it was created."""

    @abstractmethod
    def get_user(self, phone: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def set_alert_status(self, phone: str, alert_status: AlertLevel) -> Optional[UserRecord]:
        """Update the alert flag. Returns None when the phone is unknown."""

    @abstractmethod
    def add_sos_event(self, event: SOSEvent) -> SOSEvent:
        ...

    @abstractmethod
    def list_users(self) -> List[UserRecord]:
        ...

    @abstractmethod
    def list_sos_events(self) -> List[SOSEvent]:
        ...
