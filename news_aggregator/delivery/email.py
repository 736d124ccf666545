"""Operator email alerts via Resend."""

from datetime import datetime
from pathlib import Path
from typing import Optional

import resend
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..config import EMAIL_FROM, EMAIL_TO, RESEND_API_KEY
from ..utils import get_logger

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class AlertSender:
    """Send aggregation alerts and run reports to the operator."""

    def __init__(self, to: str = EMAIL_TO, sender: str = EMAIL_FROM):
        resend.api_key = RESEND_API_KEY
        self.to = to
        self.sender = sender
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=select_autoescape(["html"]),
        )

    def render_error_alert(self, error: str, context: str = "") -> str:
        """Render the failure alert HTML."""
        template = self.env.get_template("alert.html")
        return template.render(
            date=datetime.now().strftime("%B %d, %Y at %H:%M"),
            error=error,
            context=context,
        )

    def render_run_report(self, stats: dict) -> str:
        """Render the run summary HTML."""
        template = self.env.get_template("run_report.html")
        return template.render(
            date=datetime.now().strftime("%A, %B %d, %Y"),
            stats=stats,
            failed_sources=stats.get("failedSources", []),
        )

    def _send(self, subject: str, html: str) -> str:
        try:
            response = resend.Emails.send({
                "from": self.sender,
                "to": [self.to],
                "subject": subject,
                "html": html,
            })

            email_id = response.get("id", "unknown")
            logger.info(f"Email sent: {email_id}")
            return email_id

        except Exception as e:
            logger.error(f"Failed to send email: {e}")
            raise

    def send_error_alert(self, error: str, context: str = "") -> str:
        """Send an error alert email when the aggregation run fails."""
        date_str = datetime.now().strftime("%B %d, %Y at %H:%M")
        html = self.render_error_alert(error, context)
        return self._send(f"[ALERT] News aggregation failed - {date_str}", html)

    def send_run_report(self, stats: dict) -> str:
        """Send a summary of a completed run."""
        date_str = datetime.now().strftime("%B %d, %Y")
        html = self.render_run_report(stats)
        subject = f"News aggregation - {stats.get('newCount', 0)} new articles - {date_str}"
        return self._send(subject, html)

    def send_test(self) -> str:
        """Send a test email to verify configuration."""
        return self.send_run_report({
            "newCount": 3,
            "duplicateCount": 1,
            "totalFetched": 4,
            "failedSources": ["Reuters India Business"],
        })
