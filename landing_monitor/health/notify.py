"""
Health notifications - Email delivery with stdout fallback.

This module sends the finished report to the configured recipients.
SMTP settings come from the environment.
"""

import logging
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any, Optional, Sequence

from landing_monitor.core.ports import Notifier

logger = logging.getLogger(__name__)


class AdapterSmtpNotifier(Notifier):
    """
    Notifier sending an HTML email over SMTP.

    Connection settings are read from the environment at send time:
    SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASSWORD and SMTP_FROM.
    """

    def __init__(
        self, reply_to: Optional[str] = None, sender_name: Optional[str] = None
    ):
        """
        Initialize the SMTP notifier.

        Args:
            reply_to: Optional Reply-To address
            sender_name: Optional display name for the From header
        """
        self.reply_to = reply_to
        self.sender_name = sender_name

    def build_message(
        self, recipients: Sequence[str], subject: str, body: Any
    ) -> MIMEMultipart:
        """Build the MIME message without sending it."""
        sender = os.environ.get("SMTP_FROM", "landing-monitor@localhost")

        msg = MIMEMultipart("alternative")
        msg["From"] = (
            formataddr((self.sender_name, sender)) if self.sender_name else sender
        )
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        if self.reply_to:
            msg["Reply-To"] = self.reply_to

        msg.attach(MIMEText(str(body), "html"))
        return msg

    def send(self, recipients: Sequence[str], subject: str, body: Any) -> bool:
        """
        Send the report email.

        Args:
            recipients: Recipient email addresses
            subject: Email subject
            body: HTML body

        Returns:
            True if sent successfully, False otherwise
        """
        if not recipients:
            logger.warning("No notification recipients configured")
            return False

        msg = self.build_message(recipients, subject, body)

        try:
            smtp_host = os.environ.get("SMTP_HOST", "localhost")
            smtp_port = int(os.environ.get("SMTP_PORT", "25"))
            smtp_user = os.environ.get("SMTP_USER")
            smtp_password = os.environ.get("SMTP_PASSWORD")

            server = smtplib.SMTP(smtp_host, smtp_port)

            # Enable TLS if credentials provided
            if smtp_user and smtp_password:
                server.starttls()
                server.login(smtp_user, smtp_password)

            server.sendmail(msg["From"], list(recipients), msg.as_string())
            server.quit()

            logger.info("Sent email notification to %s", ", ".join(recipients))
            return True
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Failed to send email: %s", e, exc_info=True)
            return False


class AdapterStdoutNotifier(Notifier):
    """Notifier printing the report to stdout."""

    def send(self, recipients: Sequence[str], subject: str, body: Any) -> bool:
        print()
        print(f"{subject} -> {', '.join(recipients) or '(no recipients)'}")
        print(body)
        return True


def notify(
    recipients: Sequence[str],
    subject: str,
    html_body: str,
    text_body: str,
    email: Optional[Notifier] = None,
    fallback: Optional[Notifier] = None,
) -> bool:
    """
    Send a report by email, falling back to stdout.

    Args:
        recipients: Recipient email addresses
        subject: Notification subject
        html_body: Report for the email channel
        text_body: Report for the stdout fallback
        email: Email notifier (default: AdapterSmtpNotifier)
        fallback: Fallback notifier (default: AdapterStdoutNotifier)

    Returns:
        True if the email was delivered, False if the fallback was used
    """
    if email is None:
        email = AdapterSmtpNotifier()
    if fallback is None:
        fallback = AdapterStdoutNotifier()

    if recipients and email.send(recipients, subject, html_body):
        return True

    fallback.send(recipients, subject, text_body)
    return False
