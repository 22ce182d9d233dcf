"""Unit tests for notification services."""
from __future__ import annotations

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from portfolio_tracker.config import EmailConfig, TelegramConfig
from portfolio_tracker.notifications.email import EmailNotifier
from portfolio_tracker.models import PortfolioSnapshot
from portfolio_tracker.notifications.telegram import (
    MAX_MESSAGE_LENGTH,
    TelegramNotifier,
    split_message,
)


def _telegram_session(status: int) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.post = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


# ---------------------------------------------------------------------------
# TelegramNotifier
# ---------------------------------------------------------------------------


@pytest.fixture()
def telegram_notifier() -> TelegramNotifier:
    return TelegramNotifier(
        TelegramConfig(
            enabled=True,
            update_bot_token="update-tok",
            report_bot_token="report-tok",
            chat_id="12345",
        )
    )


class TestTelegramNotifier:
    @pytest.mark.asyncio
    async def test_send_update_formats_total(
        self, telegram_notifier: TelegramNotifier, sample_snapshot: PortfolioSnapshot
    ) -> None:
        session = _telegram_session(200)
        converted = replace(sample_snapshot, total_value_usd=292.5, currency="EUR")
        with patch(
            "portfolio_tracker.notifications.telegram.aiohttp.ClientSession",
            return_value=session,
        ), patch("portfolio_tracker.notifications.telegram.aiohttp.TCPConnector"):
            result = await telegram_notifier.send_update(converted)

        assert result is True
        url = session.post.call_args.args[0]
        payload = session.post.call_args.kwargs["json"]
        assert url == "https://api.telegram.org/botupdate-tok/sendMessage"
        assert payload["disable_notification"] is True
        assert payload["text"] == "Portfolio: €292.50"

    @pytest.mark.asyncio
    async def test_send_report_uses_report_bot(
        self, telegram_notifier: TelegramNotifier, sample_snapshot: PortfolioSnapshot
    ) -> None:
        session = _telegram_session(200)
        with patch(
            "portfolio_tracker.notifications.telegram.aiohttp.ClientSession",
            return_value=session,
        ), patch("portfolio_tracker.notifications.telegram.aiohttp.TCPConnector"):
            result = await telegram_notifier.send_report(sample_snapshot, failed=1)

        assert result is True
        assert "botreport-tok" in session.post.call_args.args[0]
        payload = session.post.call_args.kwargs["json"]
        assert payload["text"].startswith("📋 Portfolio Report\n\n💼 Portfolio: $325.00")
        assert "TTT: 50.0000 @ $0.50 = $25.00" in payload["text"]
        assert "1 wallet(s) could not be read" in payload["text"]
        assert payload["disable_notification"] is False

    @pytest.mark.asyncio
    async def test_long_report_split_across_messages(
        self, telegram_notifier: TelegramNotifier, sample_snapshot: PortfolioSnapshot
    ) -> None:
        many = replace(sample_snapshot, holdings=sample_snapshot.holdings * 100)
        session = _telegram_session(200)
        with patch(
            "portfolio_tracker.notifications.telegram.aiohttp.ClientSession",
            return_value=session,
        ), patch("portfolio_tracker.notifications.telegram.aiohttp.TCPConnector"):
            assert await telegram_notifier.send_report(many) is True

        texts = [c.kwargs["json"]["text"] for c in session.post.call_args_list]
        assert len(texts) > 1
        assert all(len(t) <= MAX_MESSAGE_LENGTH for t in texts)
        assert "\n".join(texts).count("SOL: 3.0000") == 100

    @pytest.mark.asyncio
    async def test_non_200_is_failure(
        self, telegram_notifier: TelegramNotifier, sample_snapshot: PortfolioSnapshot
    ) -> None:
        with patch(
            "portfolio_tracker.notifications.telegram.aiohttp.ClientSession",
            return_value=_telegram_session(403),
        ), patch("portfolio_tracker.notifications.telegram.aiohttp.TCPConnector"):
            result = await telegram_notifier.send_update(sample_snapshot)
        assert result is False

    def test_report_token_falls_back_to_update_token(self) -> None:
        notifier = TelegramNotifier(
            TelegramConfig(enabled=True, update_bot_token="only", chat_id="1")
        )
        assert notifier.report_bot_token == "only"

    @pytest.mark.asyncio
    async def test_unconfigured_returns_false(self, sample_snapshot: PortfolioSnapshot) -> None:
        notifier = TelegramNotifier(TelegramConfig(enabled=True))
        assert await notifier.send_update(sample_snapshot) is False
        assert await notifier.send_report(sample_snapshot) is False


class TestSplitMessage:
    def test_short_text_is_one_chunk(self) -> None:
        assert split_message("a\nb") == ["a\nb"]

    def test_breaks_on_line_boundaries(self) -> None:
        assert split_message("aaaa\nbbbb\ncc", limit=9) == ["aaaa\nbbbb", "cc"]

    def test_overlong_line_is_cut(self) -> None:
        assert split_message("abcdefgh", limit=3) == ["abc", "def", "gh"]


# ---------------------------------------------------------------------------
# EmailNotifier
# ---------------------------------------------------------------------------


@pytest.fixture()
def email_notifier() -> EmailNotifier:
    return EmailNotifier(
        EmailConfig(
            enabled=True,
            report_email="test@example.com",
            smtp_server="smtp.example.com",
            smtp_port=587,
            sender_email="sender@example.com",
            sender_password="password123",
        )
    )


class TestEmailNotifier:
    @pytest.mark.asyncio
    async def test_send_report_success(
        self, email_notifier: EmailNotifier, sample_snapshot: PortfolioSnapshot
    ) -> None:
        mock_smtp = MagicMock()
        with patch("portfolio_tracker.notifications.email.smtplib.SMTP", return_value=mock_smtp):
            result = await email_notifier.send_report(sample_snapshot)
        assert result is True
        mock_smtp.starttls.assert_called_once()
        mock_smtp.login.assert_called_once_with("sender@example.com", "password123")
        msg = mock_smtp.send_message.call_args.args[0]
        assert msg["Subject"] == "📋 Portfolio Report: $325.00"
        assert msg["To"] == "test@example.com"
        assert "SOL: 3.0000 @ $100.00 = $300.00" in msg.get_payload()[0].get_payload(decode=True).decode()
        mock_smtp.quit.assert_called_once()

    @pytest.mark.asyncio
    async def test_smtp_error_returns_false(
        self, email_notifier: EmailNotifier, sample_snapshot: PortfolioSnapshot
    ) -> None:
        with patch(
            "portfolio_tracker.notifications.email.smtplib.SMTP",
            side_effect=ConnectionError("SMTP down"),
        ):
            result = await email_notifier.send_report(sample_snapshot)
        assert result is False

    @pytest.mark.asyncio
    async def test_no_report_email_returns_false(self, sample_snapshot: PortfolioSnapshot) -> None:
        notifier = EmailNotifier(EmailConfig(enabled=True))
        assert await notifier.send_report(sample_snapshot) is False

    @pytest.mark.asyncio
    async def test_no_credentials_returns_false(self, sample_snapshot: PortfolioSnapshot) -> None:
        notifier = EmailNotifier(EmailConfig(enabled=True, report_email="test@example.com"))
        assert await notifier.send_report(sample_snapshot) is False

    @pytest.mark.asyncio
    async def test_send_update_is_noop(
        self, email_notifier: EmailNotifier, sample_snapshot: PortfolioSnapshot
    ) -> None:
        assert await email_notifier.send_update(sample_snapshot) is False
