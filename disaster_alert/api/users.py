"""
Users Router - Profile upsert and alert status endpoints
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from disaster_alert.db import RecordStore, StoreError
from disaster_alert.dependencies import get_store
from disaster_alert.models import (
    ALERT_LEVELS,
    AlertLevel,
    AlertStatusResponse,
    AlertUpdateRequest,
    UserUpsertRequest,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_USER_FIELDS = ["phone", "email", "city", "locality", "fullAddress"]


def _require_phone(phone: str) -> str:
    phone = (phone or "").strip()
    if not phone:
        raise HTTPException(status_code=400, detail="Phone number is required")
    return phone


@router.post("")
def create_or_update_user(
    request: UserUpsertRequest,
    store: RecordStore = Depends(get_store)
):
    """
    Create a user, or update the existing user with the same phone.

    New users start with alert status "green". Updates never touch the
    alert status.
    """
    values = {field: (getattr(request, field) or "").strip() for field in REQUIRED_USER_FIELDS}
    missing = [field for field, value in values.items() if not value]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required fields: {', '.join(missing)}"
        )

    try:
        record, created = store.upsert_user(
            phone=values["phone"],
            email=values["email"],
            city=values["city"],
            locality=values["locality"],
            full_address=values["fullAddress"],
            timestamp=request.timestamp or utc_now_iso()
        )
    except StoreError as e:
        logger.error(f"Error saving user: {e}")
        raise HTTPException(status_code=500, detail="Failed to save user data")

    if created:
        return {"message": "User created", "phone": record.phone, "created": True}
    return {"message": "User updated", "phone": record.phone, "updated": True}


@router.get("/{phone}/alerts", response_model=AlertStatusResponse)
def get_alert_status(
    phone: str,
    store: RecordStore = Depends(get_store)
):
    """
    Get the alert status for a user.

    The timestamp is the time of this read.
    """
    phone = _require_phone(phone)

    try:
        record = store.get_user(phone)
    except StoreError as e:
        logger.error(f"Error fetching user alerts: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch alert status")

    if not record:
        raise HTTPException(status_code=404, detail="User not found")

    return AlertStatusResponse(
        phone=phone,
        alertStatus=record.alert_status,
        timestamp=utc_now_iso()
    )


@router.put("/{phone}/alerts")
def set_alert_status(
    phone: str,
    request: AlertUpdateRequest,
    store: RecordStore = Depends(get_store)
):
    """
    Set a user's alert status to "green" or "red".

    Any other value is rejected before the user is looked up.
    """
    phone = _require_phone(phone)

    if request.alertStatus not in ALERT_LEVELS:
        raise HTTPException(
            status_code=400,
            detail="Alert status must be 'green' or 'red'"
        )

    try:
        record = store.set_alert_status(phone, AlertLevel(request.alertStatus))
    except StoreError as e:
        logger.error(f"Error updating user alerts: {e}")
        raise HTTPException(status_code=500, detail="Failed to update alert status")

    if not record:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"Alert status for {phone} set to {record.alert_status.value}")
    return {
        "message": "Alert status updated",
        "phone": phone,
        "alertStatus": record.alert_status.value,
        "timestamp": utc_now_iso()
    }
