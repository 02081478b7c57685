"""
Assistant Router - Emergency guidance chat
"""
from fastapi import APIRouter, Depends, HTTPException

from disaster_alert.dependencies import get_assistant_service
from disaster_alert.models import AssistantRequest, utc_now_iso
from disaster_alert.services.assistant_service import AssistantService

router = APIRouter()


@router.post("/chat")
async def chat(
    request: AssistantRequest,
    service: AssistantService = Depends(get_assistant_service)
):
    """
    Ask the emergency assistant a question.

    Uses Gemini when configured, otherwise built-in guidance for earthquakes,
    floods, fires, shelters and emergency kits.
    """
    message = (request.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")

    result = await service.reply(message)
    return {**result, "timestamp": utc_now_iso()}
