"""
Webhook Service
Posts visitor check-in alerts to an external relay (e.g. a WhatsApp workflow).
"""
from datetime import datetime
from typing import Optional
import logging

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)


class WebhookService:

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url if url is not None else settings.visitor_alert_webhook_url
        self.timeout = timeout or settings.visitor_alert_webhook_timeout_seconds
        self.enabled = bool(self.url)

    def build_check_in_payload(
        self,
        visitor_name: str,
        host_name: Optional[str],
        email: Optional[str] = None,
        phone_number: Optional[str] = None,
        company: Optional[str] = None,
        purpose: Optional[str] = None,
        host_department: Optional[str] = None,
        host_phone: Optional[str] = None,
        host_email: Optional[str] = None,
    ) -> dict:
        return {
            "event": "VISITOR_CHECK_IN",
            "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "visitor": {
                "name": visitor_name or "Unknown",
                "email": email or "",
                "phone": phone_number or "",
                "company": company or "",
                "purpose": purpose or "",
            },
            "host": {
                "name": host_name or "General Reception",
                "department": host_department or "",
                "phone": host_phone or "",
                "email": host_email or "",
            },
            "message": (
                "VISITOR WAITING FOR APPROVAL\n\n"
                f"Visitor {visitor_name or 'Someone'} from {company or 'a company'} "
                f"has arrived to see {host_name or 'you'}.\n\n{settings.portal_url}"
            ),
        }

    def send_check_in_alert(self, payload: dict) -> bool:
        """
        POST a check-in payload to the configured webhook.

        Returns:
            True if the relay answered with a 2xx status, False otherwise
        """
        if not self.enabled:
            logger.debug("Visitor alert webhook is not configured")
            return False

        try:
            resp = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"[Webhook] Check-in alert failed: {e}")
            return False

        if not resp.ok:
            logger.warning(f"[Webhook] Check-in alert rejected with status {resp.status_code}: {resp.text[:200]}")
            return False

        logger.info(f"[Webhook] Check-in alert sent for {payload['visitor']['name']} (host phone: {payload['host']['phone'] or 'none'})")
        return True


webhook_service = WebhookService()
