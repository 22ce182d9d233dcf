"""Command-line interface for the Solana portfolio tracker."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import load_config
from .errors import ConfigurationError
from .formatting import SUPPORTED_CURRENCIES, build_report, format_amount, format_total
from .logging_setup import configure_logging
from .services import Tracker

EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="portfolio-tracker",
        description="Aggregated, currency-converted Solana wallet portfolio",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("check", help="Refresh once and print/push the total")
    sub.add_parser("report", help="Refresh once and send the holdings report")

    monitor_parser = sub.add_parser("monitor", help="Continuous refresh loop")
    monitor_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Refresh interval in minutes (overrides config)",
    )

    wallets_parser = sub.add_parser("wallets", help="Manage tracked wallets")
    wallets_sub = wallets_parser.add_subparsers(dest="wallets_command")
    wallets_sub.add_parser("list", help="List wallets")
    add_parser = wallets_sub.add_parser("add", help="Track a new wallet")
    add_parser.add_argument("address")
    add_parser.add_argument("--name", default="", help="Display name")
    for name, help_text in (
        ("remove", "Stop tracking a wallet"),
        ("enable", "Include a wallet in refreshes"),
        ("disable", "Exclude a wallet from refreshes"),
    ):
        p = wallets_sub.add_parser(name, help=help_text)
        p.add_argument("address")
    rename_parser = wallets_sub.add_parser("rename", help="Rename a wallet")
    rename_parser.add_argument("address")
    rename_parser.add_argument("name")

    currency_parser = sub.add_parser("currency", help="Show or select display currency")
    currency_parser.add_argument("code", nargs="?", default=None)

    rates_parser = sub.add_parser("rates", help="Show today's exchange rates")
    rates_parser.add_argument(
        "--refresh", action="store_true", help="Drop the cached table first"
    )

    return parser


def _run_wallets(tracker: Tracker, args: argparse.Namespace) -> int:
    registry = tracker.registry
    command = args.wallets_command or "list"

    try:
        if command == "add":
            wallet = registry.add(args.address, args.name)
            print(f"Added {wallet.display_name} ({wallet.address})")
        elif command == "remove":
            if not registry.remove(args.address):
                print(f"Wallet {args.address} is not in the registry")
                return 1
            print(f"Removed {args.address}")
        elif command in ("enable", "disable"):
            registry.set_enabled(args.address, command == "enable")
            print(f"{command.capitalize()}d {args.address}")
        elif command == "rename":
            registry.rename(args.address, args.name)
            print(f"Renamed {args.address} to {args.name}")
        else:
            for wallet in tracker.wallets():
                state = "on " if wallet.enabled else "off"
                print(f"[{state}] {wallet.display_name or wallet.id:<20} {wallet.address}")
    except KeyError:
        print(f"Wallet {args.address} is not in the registry")
        return 1
    except ValueError as e:
        print(str(e))
        return 1
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    tracker = Tracker(config)

    if args.command == "check":
        snapshot = await tracker.check_and_notify()
        if snapshot is not None:
            print(format_total(snapshot))
    elif args.command == "report":
        snapshot = await tracker.generate_report()
        if snapshot is not None:
            print(build_report(snapshot, len(tracker.last_failures)))
    elif args.command == "monitor":
        await tracker.run_continuous(args.interval)
    elif args.command == "wallets":
        return _run_wallets(tracker, args)
    elif args.command == "currency":
        if args.code:
            if len(args.code) != 3 or not args.code.isalpha():
                print(f"Invalid currency code '{args.code}'")
                return 1
            tracker.set_display_currency(args.code)
        current = tracker.display_currency
        for code, name, _ in SUPPORTED_CURRENCIES:
            marker = "*" if code == current else " "
            print(f"{marker} {code}  {name}")
        if current not in {code for code, _, _ in SUPPORTED_CURRENCIES}:
            print(f"* {current}")
    elif args.command == "rates":
        if args.refresh:
            tracker.rate_cache.clear()
        table = await tracker.rate_cache.get_rates()
        source = "default (offline)" if table.is_fallback else "live"
        print(f"Rates for {table.fetched_on.isoformat()} ({source})")
        for code, _, _ in SUPPORTED_CURRENCIES:
            rate = table.rate_for(code)
            if rate is not None:
                print(f"  1 USD = {format_amount(rate, code)}")
    else:
        build_parser().print_help()
        return 1
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)
