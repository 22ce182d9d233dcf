"""Telegram notification service."""
import logging
import ssl

import aiohttp
import certifi

from ..config import TelegramConfig
from ..formatting import REPORT_SUBJECT, build_report, format_total
from ..models import PortfolioSnapshot

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org/bot{token}/sendMessage"
SEND_TIMEOUT = 15
MAX_MESSAGE_LENGTH = 4096


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Break text into chunks under the Bot API length limit, on line boundaries
    where possible."""
    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current or not chunks:
        chunks.append(current)
    return chunks


class TelegramNotifier:
    """Push portfolio totals and holdings reports through Telegram bots.

    Totals go through the update bot with notifications muted. Reports go
    through the report bot, falling back to the update bot when only one
    token is configured.
    """

    def __init__(self, config: TelegramConfig) -> None:
        self.update_bot_token = config.update_bot_token
        self.report_bot_token = config.report_bot_token or config.update_bot_token
        self.chat_id = config.chat_id

    @property
    def configured(self) -> bool:
        return bool(self.update_bot_token and self.chat_id)

    async def _post(
        self, session: aiohttp.ClientSession, token: str, text: str, silent: bool
    ) -> bool:
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "disable_notification": silent,
        }
        async with session.post(
            API_URL.format(token=token),
            json=payload,
            timeout=aiohttp.ClientTimeout(total=SEND_TIMEOUT),
        ) as response:
            if response.status != 200:
                logger.error("Telegram rejected message: HTTP %s", response.status)
                return False
            return True

    async def _deliver(self, token: str, text: str, silent: bool) -> bool:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            for chunk in split_message(text):
                if not await self._post(session, token, chunk, silent):
                    return False
        return True

    async def send_update(self, snapshot: PortfolioSnapshot, silent: bool = True) -> bool:
        """Push the snapshot total, e.g. ``Portfolio: €292.50``."""
        if not self.configured:
            logger.warning("Telegram credentials not configured")
            return False
        text = f"Portfolio: {format_total(snapshot)}"
        if not await self._deliver(self.update_bot_token, text, silent):
            return False
        logger.info("Telegram update sent (%s)", snapshot.currency)
        return True

    async def send_report(self, snapshot: PortfolioSnapshot, failed: int = 0) -> bool:
        """Send the holdings breakdown, split across messages when long."""
        if not self.configured:
            logger.warning("Telegram credentials not configured")
            return False
        text = f"{REPORT_SUBJECT}\n\n{build_report(snapshot, failed)}"
        if not await self._deliver(self.report_bot_token, text, silent=False):
            return False
        logger.info("Telegram report sent (%d holdings)", len(snapshot.holdings))
        return True
