"""SendGrid email service for lead alerts to the PropertyHub admin.

Uses asyncio.to_thread to wrap the synchronous SendGrid client.
"""

import asyncio
import html
import logging
from datetime import datetime, timedelta, timezone

import sendgrid
from sendgrid.helpers.mail import Email, HtmlContent, Mail, To

from propertyhub.domain.enums import LeadType

logger = logging.getLogger(__name__)

IST = timezone(timedelta(hours=5, minutes=30), "IST")


def _get_config():
    """Get email config from app settings (lazy to avoid import-time issues)."""
    from propertyhub.app.config import get_settings
    s = get_settings()
    return s.sendgrid_api_key, s.notification_from_email, s.admin_email


def _get_client() -> sendgrid.SendGridAPIClient:
    """Return a configured SendGrid API client."""
    api_key, _, _ = _get_config()
    return sendgrid.SendGridAPIClient(api_key=api_key)


def format_inr(value) -> str:
    """Format an amount with Indian digit grouping, e.g. 1234567 -> ₹12,34,567."""
    try:
        amount = int(value)
    except (ValueError, TypeError):
        return "₹0"
    sign = "-" if amount < 0 else ""
    digits = str(abs(amount))
    if len(digits) <= 3:
        return f"₹{sign}{digits}"
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return f"₹{sign}{','.join(groups)},{tail}"


def format_received_at(created_at: datetime | None) -> str:
    """Render a naive-UTC timestamp in India time."""
    if created_at is None:
        created_at = datetime.now(timezone.utc)
    elif created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone(IST).strftime("%d/%m/%Y, %I:%M:%S %p IST")


def lead_subject(lead_type: str, property_title: str | None) -> str:
    if lead_type == LeadType.PROPERTY_INQUIRY.value:
        return f"New Property Inquiry: {property_title or 'Property'}"
    if lead_type == LeadType.INTERIOR_DESIGN.value:
        return "New Interior Design Consultation Request"
    return "New Contact Message"


def build_lead_alert_html(data: dict) -> str:
    """Build the admin alert HTML body. All lead text is escaped."""
    subject = html.escape(lead_subject(data.get("lead_type", ""), data.get("property_title")))
    rows = [
        ("Name", data.get("name")),
        ("Email", data.get("email")),
        ("Phone", data.get("phone")),
    ]
    if data.get("budget"):
        rows.append(("Budget", format_inr(data["budget"])))

    row_html = "".join(
        f"<p><strong>{label}:</strong> {html.escape(str(value or ''))}</p>"
        for label, value in rows
    )
    requirements = ""
    if data.get("requirements"):
        requirements = (
            "<p><strong>Requirements:</strong><br/>"
            f"{html.escape(data['requirements'])}</p>"
        )

    return f"""
<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"></head>
<body style="margin: 0; padding: 20px; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;">
    <h2>{subject}</h2>
    {row_html}
    <p><strong>Message:</strong></p>
    <p>{html.escape(data.get("message") or "")}</p>
    {requirements}
    <p><strong>Received:</strong> {format_received_at(data.get("created_at"))}</p>
</body>
</html>
"""


def _send_mail(mail: Mail) -> bool:
    """Synchronous send via SendGrid. Returns True on success."""
    client = _get_client()
    response = client.send(mail)
    if response.status_code in (200, 201, 202):
        return True
    logger.error(
        "SendGrid returned status %s: %s",
        response.status_code,
        response.body,
    )
    return False


async def send_lead_alert(data: dict) -> bool:
    """Email the admin about a new lead.

    Args:
        data: Lead snapshot (name, email, phone, message, lead_type, budget,
              requirements, created_at) plus optional property_title.

    Returns:
        True on success, False on failure or when email is not configured.
    """
    api_key, from_email, admin_email = _get_config()
    if not api_key or not admin_email:
        logger.warning("SendGrid or ADMIN_EMAIL not set; skipping lead alert email")
        return False

    try:
        mail = Mail(
            from_email=Email(from_email, "PropertyHub"),
            to_emails=To(admin_email),
            subject=lead_subject(data.get("lead_type", ""), data.get("property_title")),
            html_content=HtmlContent(build_lead_alert_html(data)),
        )
        result = await asyncio.to_thread(_send_mail, mail)
        if result:
            logger.info("Lead alert email sent to %s", admin_email)
        return result
    except Exception:
        logger.exception("Failed to send lead alert email for lead %s", data.get("id"))
        return False
