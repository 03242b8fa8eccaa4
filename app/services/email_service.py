"""
Email Service
Sends the "visitor waiting for approval" email to a host.
"""
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self):
        self.enabled = settings.email_enabled
        self.smtp_host = settings.smtp_server
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_username
        self.smtp_password = settings.smtp_password
        self.from_email = settings.email_from

    def build_host_alert(
        self,
        to_email: str,
        visitor_name: str,
        host_name: str,
        company: Optional[str] = None,
        phone_number: Optional[str] = None,
        purpose: Optional[str] = None,
        host_department: Optional[str] = None,
    ) -> MIMEMultipart:
        """Compose the approval request email for a host."""
        msg = MIMEMultipart('alternative')
        msg['From'] = self.smtp_user or self.from_email
        msg['To'] = to_email
        msg['Subject'] = "VISITOR WAITING FOR APPROVAL"

        body = (
            "VISITOR\n"
            f"Name: {visitor_name}\n"
            f"Company: {company or 'N/A'}\n"
            f"Phone: {phone_number or 'N/A'}\n"
            f"Purpose: {purpose or 'N/A'}\n\n"
            "HOST\n"
            f"{host_name} - {host_department or 'N/A'}\n\n"
            "ACTION REQUIRED\n"
            "Log in to approve or reject:\n"
            f"{settings.portal_url}\n"
        )
        msg.attach(MIMEText(body, 'plain'))
        return msg

    def send_host_alert(self, to_email: str, visitor_name: str, host_name: str, **details) -> bool:
        """
        Email a host that a visitor is waiting.

        Returns:
            True if email sent successfully, False otherwise
        """
        if not self.enabled:
            logger.debug("Email service is disabled. Set EMAIL_ENABLED=true to enable.")
            return False

        if not self.smtp_user or not self.smtp_password:
            logger.warning("SMTP credentials not configured. Email not sent.")
            return False

        msg = self.build_host_alert(to_email, visitor_name, host_name, **details)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=10) as server:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
            logger.info(f"[Email] Host alert sent to {to_email} for visitor {visitor_name}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[Email] Failed to send host alert to {to_email}: {e}")
            return False


email_service = EmailService()
