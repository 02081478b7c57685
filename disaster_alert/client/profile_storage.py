"""
Local copy of the user's profile so a restarted client can resume monitoring
without going through onboarding again.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from disaster_alert.client.models import UserProfile

logger = logging.getLogger(__name__)


class ProfileStorage:
    """Reads and writes one UserProfile as a JSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[UserProfile]:
        """Saved profile, or None when nothing was saved or the file is unreadable"""
        if not self.path.exists():
            return None
        try:
            return UserProfile.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning(f"Failed to load saved profile from {self.path}: {e}")
            return None

    def save(self, profile: UserProfile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(profile.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(self.path)
        logger.info(f"Profile saved to {self.path}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
