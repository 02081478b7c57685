"""
Platform notifications (the OS-level popup outside the app)
"""
import logging
from abc import ABC, abstractmethod

from disaster_alert.client.models import PermissionState

logger = logging.getLogger(__name__)


class PlatformNotifier(ABC):
    """Permission-gated platform notification channel"""

    @property
    @abstractmethod
    def permission(self) -> PermissionState:
        ...

    @abstractmethod
    async def request_permission(self) -> PermissionState:
        """Ask the user for permission and return the outcome"""

    @abstractmethod
    def show(self, title: str, body: str, tag: str = "", require_interaction: bool = False) -> None:
        ...


class LogNotifier(PlatformNotifier):
    """Notifier for headless clients: permission requests are granted and notifications are logged"""

    def __init__(self, permission: PermissionState = PermissionState.default):
        self._permission = PermissionState(permission)

    @property
    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        if self._permission == PermissionState.default:
            self._permission = PermissionState.granted
        return self._permission

    def show(self, title: str, body: str, tag: str = "", require_interaction: bool = False) -> None:
        logger.warning(f"[notification{':' + tag if tag else ''}] {title}: {body}")
