"""
API routers package
"""
from disaster_alert.api import (
    system,
    users,
    sos,
    places,
    assistant
)

__all__ = [
    "system",
    "users",
    "sos",
    "places",
    "assistant"
]
