"""E-mail delivery of itineraries through the Resend HTTP API."""
import base64
import logging
from typing import Optional

import httpx

from trip_agent.config import Settings
from trip_agent.exporters.markdown import itinerary_to_markdown
from trip_agent.models import Itinerary

logger = logging.getLogger("email-service")

RESEND_URL = "https://api.resend.com/emails"


class EmailService:
    """Sends an itinerary, with an optional PDF attached. Never raises."""

    def __init__(self, settings: Settings, api_url: str = RESEND_URL):
        self.settings = settings
        self.api_url = api_url

    @property
    def configured(self) -> bool:
        return bool(self.settings.resend_api_key)

    async def send_itinerary_email(
        self,
        to_email: str,
        itinerary: Itinerary,
        destination: str,
        pdf_bytes: Optional[bytes] = None,
    ) -> bool:
        """
        Send the itinerary to one recipient.

        Args:
            to_email: Recipient address
            itinerary: Itinerary to render into the message body
            destination: City name used in the subject and header
            pdf_bytes: Optional PDF attachment

        Returns:
            True when Resend accepted the message
        """
        if not self.configured:
            logger.error("RESEND_API_KEY not configured")
            return False

        logger.info(f"Sending itinerary email to {to_email} for {destination}")

        payload = {
            "from": f"{self.settings.email_sender_name} <{self.settings.email_sender}>",
            "to": [to_email],
            "subject": f"Your Travel Itinerary - {destination}",
            "html": create_email_html(destination, itinerary_to_markdown(itinerary, destination)),
        }
        if pdf_bytes:
            payload["attachments"] = [{
                "filename": "itinerary.pdf",
                "content": base64.b64encode(pdf_bytes).decode("ascii"),
            }]

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    headers={
                        "Authorization": f"Bearer {self.settings.resend_api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logger.error(f"Error sending email: {e}", exc_info=True)
            return False

        if response.status_code == 200:
            logger.info(f"Email sent successfully. ID: {response.json().get('id')}")
            return True

        logger.error(f"Failed to send email: {response.status_code} - {response.text}")
        return False


def create_email_html(destination: str, itinerary_content: str) -> str:
    """Create HTML email template for itinerary."""
    formatted_lines = []
    in_list = False

    for line in itinerary_content.split("\n"):
        stripped = line.strip()
        if stripped.startswith("- "):
            if not in_list:
                formatted_lines.append("<ul style='margin-left: 20px;'>")
                in_list = True
            formatted_lines.append(f"<li style='margin-bottom: 8px;'>{stripped[2:]}</li>")
            continue

        if in_list:
            formatted_lines.append("</ul>")
            in_list = False
        if stripped.startswith("## "):
            formatted_lines.append(f"<h3 style='color: #6366f1; margin-top: 16px; margin-bottom: 8px;'>{stripped[3:]}</h3>")
        elif stripped.startswith("# "):
            formatted_lines.append(f"<h2 style='color: #4f46e5; margin-top: 24px; margin-bottom: 12px;'>{stripped[2:]}</h2>")
        elif stripped:
            formatted_lines.append(f"<p style='margin: 10px 0;'>{line}</p>")

    if in_list:
        formatted_lines.append("</ul>")

    formatted_content = "\n".join(formatted_lines)

    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #f5f5f5;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff;">
        <div style="background-color: #4f46e5; padding: 30px; text-align: center;">
            <h1 style="margin: 0; color: #ffffff; font-size: 24px;">Your Itinerary for {destination}</h1>
        </div>
        <div style="padding: 30px;">
            {formatted_content}
        </div>
        <div style="background-color: #f9fafb; padding: 20px; text-align: center; border-top: 1px solid #e5e7eb;">
            <p style="margin: 0; color: #6b7280; font-size: 14px;">The full plan is attached as a PDF. Have a wonderful trip!</p>
        </div>
    </div>
</body>
</html>
"""
