"""
System Router - Health checks
"""
from fastapi import APIRouter, Depends

from disaster_alert.config import settings
from disaster_alert.db import RecordStore
from disaster_alert.dependencies import get_store
from disaster_alert.models import utc_now_iso

router = APIRouter()


@router.get("/health")
async def health_check(store: RecordStore = Depends(get_store)):
    """
    Liveness check. Always answers, even when storage is unavailable.
    """
    return {
        "status": "OK",
        "message": "Server running",
        "timestamp": utc_now_iso(),
        "environment": settings.APP_ENV,
        "storage": {
            "backend": store.backend,
            "ready": store.ready
        }
    }
