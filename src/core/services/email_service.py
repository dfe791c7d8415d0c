"""
Email Notification Service

Formats a MentionRecord into an HTML email and delivers it over SMTP.
Delivery problems are logged and reported in the result dict; they never
propagate to the caller because the webhook has already been acknowledged.
"""

import asyncio
import html
import logging
import smtplib
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Any, Dict, Optional

from ..config import EmailSettings, settings
from ..schemas.mention import MentionRecord
from ..utils.time import format_utc, from_epoch

logger = logging.getLogger(__name__)

CONTENT_EXCERPT_LIMIT = 1000


class EmailNotificationService:
    """Service for emailing mention notifications."""

    def __init__(self, email_settings: Optional[EmailSettings] = None):
        self.config = email_settings or settings.email

    async def send_mention_notification(self, mention: MentionRecord) -> Dict[str, Any]:
        """
        Send a mention notification email.

        Args:
            mention: Enriched mention record

        Returns:
            Dictionary with success status and message id or error
        """
        try:
            if not self.config.is_configured:
                logger.error("Email host or recipient not configured")
                return {"success": False, "error": "Email configuration missing"}

            subject = self.format_subject(mention)
            body = self.format_html(mention)

            logger.info(
                f"Sending mention email | platform={mention.platform.value} | comment_id={mention.comment_id} | "
                f"to={self.config.recipient} | subject={subject}"
            )

            message_id = await asyncio.to_thread(self._send_message, subject, body)

            logger.info(f"Mention email sent | comment_id={mention.comment_id} | message_id={message_id}")
            return {"success": True, "message_id": message_id}

        except Exception as e:
            logger.exception(f"Error sending mention email | comment_id={mention.comment_id}")
            return {"success": False, "error": str(e)}

    def format_subject(self, mention: MentionRecord) -> str:
        account = mention.mentioned_username or "your account"
        return f"New {mention.platform.label} {mention.mention_type} mention for {account}"

    def format_html(self, mention: MentionRecord) -> str:
        """Format the notification body as HTML. Every interpolated value is escaped."""

        def esc(text: Optional[str]) -> str:
            return html.escape(text or "")

        content = mention.post_content or ""
        if len(content) > CONTENT_EXCERPT_LIMIT:
            content = content[: CONTENT_EXCERPT_LIMIT - 3] + "..."

        when = format_utc(from_epoch(mention.timestamp))
        parts = [
            f"<h2>You were mentioned on {esc(mention.platform.label)}</h2>",
            f"<p><strong>Account:</strong> {esc(mention.account_label)}</p>",
            f"<p><strong>Time:</strong> {esc(when)}</p>",
            f"<p><strong>By User:</strong> {esc(mention.author)}</p>",
            f"<p><strong>Type:</strong> {esc(mention.mention_type.capitalize())}</p>",
            f"<p><strong>Comment:</strong> {esc(mention.comment_text)}</p>",
        ]
        if content:
            parts.append(f"<p><strong>Post Content:</strong> {esc(content)}</p>")
        if mention.post_url:
            url = esc(mention.post_url)
            parts.append(f'<p><strong>Link:</strong> <a href="{url}">{url}</a></p>')
        parts.append("<hr>")
        parts.append("<p><em>This is an automated notification from your social media webhook monitor.</em></p>")
        return "\n".join(parts)

    def _send_message(self, subject: str, body: str) -> str:
        """Blocking SMTP delivery; runs in a worker thread."""
        msg = MIMEText(body, "html", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.config.sender or self.config.user
        msg["To"] = self.config.recipient
        msg["Message-ID"] = make_msgid()

        with smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout_seconds) as smtp:
            if self.config.use_tls:
                smtp.starttls()
            if self.config.user and self.config.password:
                smtp.login(self.config.user, self.config.password)
            smtp.send_message(msg)

        return msg["Message-ID"]
