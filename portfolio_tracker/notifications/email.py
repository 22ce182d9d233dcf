"""Email notification service."""
import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ..config import EmailConfig
from ..formatting import REPORT_SUBJECT, build_report, format_total
from ..models import PortfolioSnapshot

logger = logging.getLogger(__name__)


class EmailNotifier:
    """Send portfolio reports via email."""

    def __init__(self, config: EmailConfig) -> None:
        self.report_email = config.report_email
        self.smtp_server = config.smtp_server
        self.smtp_port = config.smtp_port
        self.sender_email = config.sender_email
        self.sender_password = config.sender_password

    def _deliver(self, msg: MIMEMultipart) -> None:
        server = smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=30)
        try:
            server.starttls()
            server.login(self.sender_email, self.sender_password)
            server.send_message(msg)
        finally:
            server.quit()

    async def send_report(self, snapshot: PortfolioSnapshot, failed: int = 0) -> bool:
        """Email the holdings breakdown; the subject carries the total."""
        if not self.report_email:
            logger.debug("No report email configured, skipping email")
            return False

        if not self.sender_email or not self.sender_password:
            logger.warning("Email credentials not configured")
            return False

        msg = MIMEMultipart()
        msg["From"] = self.sender_email
        msg["To"] = self.report_email
        msg["Subject"] = f"{REPORT_SUBJECT}: {format_total(snapshot)}"

        msg.attach(MIMEText(build_report(snapshot, failed), "plain"))

        try:
            await asyncio.to_thread(self._deliver, msg)
            logger.info("Report email sent to %s", self.report_email)
            return True
        except Exception as e:
            logger.error("Failed to send email: %s", e)
            return False

    async def send_update(self, snapshot: PortfolioSnapshot, silent: bool = True) -> bool:
        """Per-refresh totals are not emailed."""
        return False
