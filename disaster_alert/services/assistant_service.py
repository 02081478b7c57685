"""
Assistant Service - Emergency preparedness guidance

Answers with Gemini when GEMINI_API_KEY is configured and falls back to
built-in keyword guidance whenever the model is unavailable.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from disaster_alert.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an emergency assistant inside a disaster alert app. Give short, "
    "practical safety guidance. Always tell the user to call local emergency "
    "services when life is at risk."
)

GUIDANCE = [
    (
        ("earthquake",),
        "In case of an earthquake: DROP to your hands and knees, take COVER under a desk "
        "or table, and HOLD ON until shaking stops. If outdoors, move away from buildings. "
        "Stay calm and follow evacuation procedures if necessary."
    ),
    (
        ("flood",),
        "For flood safety: Move to higher ground immediately. Never drive through flooded "
        "roads. If trapped, call for help and wait for rescue. Keep emergency supplies "
        "ready and monitor weather alerts."
    ),
    (
        ("fire",),
        "Fire emergency protocol: Call emergency services immediately. If possible, use "
        "the nearest exit and stay low to avoid smoke. Feel doors before opening. If "
        "clothes catch fire: Stop, Drop, and Roll. Meet at your designated meeting point."
    ),
    (
        ("shelter", "safe"),
        "Safe shelter locations include reinforced buildings, emergency shelters, and "
        "evacuation centers. Avoid windows, use interior rooms on lower floors. Keep an "
        "emergency kit with water, food, and medical supplies."
    ),
    (
        ("kit", "checklist", "supplies"),
        "A basic emergency kit: water (4 litres per person per day), non-perishable food, "
        "flashlight, batteries, first aid kit, medications, phone charger, copies of "
        "important documents, cash, and a whistle."
    ),
]

DEFAULT_GUIDANCE = (
    "I'm here to help with emergency preparedness and safety guidance. Ask me about "
    "earthquake safety, flood procedures, fire evacuation, shelter locations, or any "
    "other disaster-related concerns."
)


def keyword_guidance(message: str) -> str:
    """Pick the canned guidance whose keywords appear first in GUIDANCE order"""
    lowered = message.lower()
    for keywords, reply in GUIDANCE:
        if any(k in lowered for k in keywords):
            return reply
    return DEFAULT_GUIDANCE


class AssistantService:
    """Emergency chat assistant with an offline fallback"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or default_settings
        self.transport = transport

    async def _generate_gemini(self, message: str) -> Optional[str]:
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": f"{SYSTEM_PROMPT}\n\n{message}"}]}
            ]
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.ASSISTANT_TIMEOUT_SEC,
                transport=self.transport
            ) as client:
                response = await client.post(
                    self.settings.GEMINI_API_URL,
                    params={"key": self.settings.GEMINI_API_KEY},
                    json=payload
                )
                response.raise_for_status()
                data = response.json()

            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(p.get("text", "") for p in parts).strip()
            return text or None

        except httpx.TimeoutException:
            logger.error("Gemini request timed out")
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Gemini generation error: {e}")
        return None

    async def reply(self, message: str) -> Dict[str, Any]:
        """Answer a user message. Source is "llm" or "guidance"."""
        if self.settings.GEMINI_API_KEY:
            text = await self._generate_gemini(message)
            if text:
                return {"reply": text, "source": "llm"}
            logger.info("Falling back to keyword guidance")

        return {"reply": keyword_guidance(message), "source": "guidance"}


# Singleton instance
assistant_service = AssistantService()
