"""SMS service via the Twilio REST API for admin lead alerts.

Endpoint used:
- POST /2010-04-01/Accounts/{sid}/Messages.json: send outbound SMS
"""

import logging

import httpx

from propertyhub.app.config import get_settings
from propertyhub.domain.enums import LeadType
from propertyhub.services.email_service import format_inr

logger = logging.getLogger(__name__)


def build_lead_sms(data: dict) -> str:
    budget = format_inr(data["budget"]) if data.get("budget") else "Not specified"
    who = f"{data.get('name')} ({data.get('phone')})"
    lead_type = data.get("lead_type")
    if lead_type == LeadType.PROPERTY_INQUIRY.value:
        title = data.get("property_title") or "a property"
        return f"New Property Inquiry from {who} for {title}. Budget: {budget}"
    if lead_type == LeadType.INTERIOR_DESIGN.value:
        return f"New Interior Design Request from {who}. Budget: {budget}"
    return f"New Contact Message from {who}."


class SMSService:
    """Send SMS messages through Twilio."""

    def __init__(self):
        self.settings = get_settings()
        self.base_url = "https://api.twilio.com/2010-04-01"

    @property
    def _configured(self) -> bool:
        return bool(
            self.settings.twilio_account_sid
            and self.settings.twilio_auth_token
            and self.settings.twilio_phone_number
        )

    async def send_sms(self, to_number: str, message: str) -> dict:
        """Send one SMS. Never raises; failures come back as ``{"ok": False, ...}``."""
        if not self._configured:
            logger.warning("Twilio SMS not configured; message not sent to %s", to_number)
            return {"ok": False, "error": "twilio_not_configured", "message": message}

        url = f"{self.base_url}/Accounts/{self.settings.twilio_account_sid}/Messages.json"
        payload = {
            "To": to_number,
            "From": self.settings.twilio_phone_number,
            "Body": message,
        }
        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                resp = await client.post(
                    url,
                    data=payload,
                    auth=(self.settings.twilio_account_sid, self.settings.twilio_auth_token),
                )
        except httpx.TimeoutException:
            logger.error("Twilio request timed out for %s", to_number)
            return {"ok": False, "error": "timeout", "message": message}
        except httpx.HTTPError as e:
            logger.error("Twilio request failed for %s: %s", to_number, e)
            return {"ok": False, "error": "http_error", "message": message}

        if 200 <= resp.status_code < 300:
            logger.info("SMS sent to %s via Twilio (status=%d)", to_number, resp.status_code)
            try:
                sid = resp.json().get("sid")
            except ValueError:
                sid = None
            return {"ok": True, "sid": sid}

        logger.error("Twilio SMS failed (%d): %s", resp.status_code, resp.text[:300])
        return {"ok": False, "error": f"http_{resp.status_code}", "status": resp.status_code, "message": message}

    async def send_lead_alert(self, data: dict) -> dict:
        admin_phone = self.settings.admin_phone
        if not admin_phone:
            logger.warning("ADMIN_PHONE not set; skipping lead alert SMS")
            return {"ok": False, "error": "admin_phone_not_configured"}
        return await self.send_sms(admin_phone, build_lead_sms(data))
