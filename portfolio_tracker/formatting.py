"""Display formatting for amounts, totals and holdings reports."""
from __future__ import annotations

from datetime import timezone

from .models import BASE_CURRENCY, PortfolioSnapshot

SUPPORTED_CURRENCIES: tuple[tuple[str, str, str], ...] = (
    ("USD", "US Dollar", "$"),
    ("EUR", "Euro", "€"),
    ("GBP", "British Pound", "£"),
    ("JPY", "Japanese Yen", "¥"),
    ("CAD", "Canadian Dollar", "C$"),
    ("AUD", "Australian Dollar", "A$"),
    ("CHF", "Swiss Franc", "Fr"),
    ("CNY", "Chinese Yuan", "¥"),
)

_SYMBOLS = {code: symbol for code, _, symbol in SUPPORTED_CURRENCIES}
_NO_MINOR_UNITS = {"JPY"}

REPORT_SUBJECT = "📋 Portfolio Report"


def currency_symbol(code: str) -> str:
    return _SYMBOLS.get(code.upper(), code.upper())


def format_amount(value: float, currency: str = BASE_CURRENCY) -> str:
    """Render an amount for display, e.g. ``$1,234.56`` or ``¥120,000``."""
    code = currency.upper()
    decimals = 0 if code in _NO_MINOR_UNITS else 2
    symbol = currency_symbol(code)
    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.{decimals}f}"
    if symbol == code:
        return f"{sign}{body} {code}"
    return f"{sign}{symbol}{body}"


def format_total(snapshot: PortfolioSnapshot) -> str:
    return format_amount(snapshot.total_value_usd, snapshot.currency)


def build_report(snapshot: PortfolioSnapshot, failed: int = 0) -> str:
    """Multi-line holdings breakdown, largest position first."""
    lines = [f"💼 Portfolio: {format_total(snapshot)}", ""]
    if not snapshot.holdings:
        lines.append("No holdings found.")
    for h in snapshot.holdings:
        lines.append(
            f"{h.symbol}: {h.quantity:,.4f} @ "
            f"{format_amount(h.unit_price_usd, snapshot.currency)} = "
            f"{format_amount(h.value_usd, snapshot.currency)}"
        )
    if failed:
        lines += ["", f"⚠️ {failed} wallet(s) could not be read this cycle"]
    captured = snapshot.captured_at.astimezone(timezone.utc)
    lines += ["", f"{captured.strftime('%Y-%m-%d %H:%M:%S')} UTC"]
    return "\n".join(lines)
