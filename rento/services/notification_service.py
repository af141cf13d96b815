# rento/services/notification_service.py
"""
Notification dispatcher: tells the host a new booking request arrived.

Posts to the external notification webhook (NOTIFICATION_WEBHOOK_URL),
which picks WhatsApp or email delivery. The result is advisory: the
workflow reports it to the caller but never rolls a booking back over it.

Expected webhook reply: {"success": true, "method": "whatsapp" | "email"}
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from rento.config import settings
from rento.utils.logger import get_logger

logger = get_logger(__name__)

CHANNEL_WHATSAPP = "whatsapp"
CHANNEL_EMAIL = "email"
CHANNEL_NONE = "none"


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    channel_used: str = CHANNEL_NONE


def channel_for(prefer_whatsapp: bool) -> str:
    return CHANNEL_WHATSAPP if prefer_whatsapp else CHANNEL_EMAIL


class NotificationDispatcher:
    def __init__(self, webhook_url: Optional[str] = None, timeout: Optional[float] = None):
        self.webhook_url = webhook_url if webhook_url is not None else settings.NOTIFICATION_WEBHOOK_URL
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_TIMEOUT_SECONDS

    async def notify(
        self, booking_id: int, channel_preference: str, payload: Optional[Dict[str, Any]] = None
    ) -> NotificationResult:
        if not self.webhook_url:
            logger.warning(f"[NOTIFY] No webhook configured, booking {booking_id} not announced")
            return NotificationResult(success=False)

        body = {"booking_id": booking_id, "channel": channel_preference, "booking": payload or {}}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.webhook_url, json=body)
        except httpx.HTTPError as e:
            logger.warning(f"[NOTIFY] Booking {booking_id} via {channel_preference} failed: {e}")
            return NotificationResult(success=False)

        if response.status_code != 200:
            logger.warning(f"[NOTIFY] Booking {booking_id}: webhook returned HTTP {response.status_code}")
            return NotificationResult(success=False)

        try:
            data = response.json()
        except ValueError:
            data = {}
        success = bool(data.get("success", True))
        channel = data.get("method") or channel_preference
        logger.info(f"[NOTIFY] Booking {booking_id} → {channel} success={success}")
        return NotificationResult(success=success, channel_used=channel if success else CHANNEL_NONE)
