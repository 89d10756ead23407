"""Staffing payroll command line interface.

Provides tools for:
- Money previews (REG/OT/DT and shift differential rows)
- Week window lookup
- Creating the database schema

Usage:
    python -m staffing_payroll.cli preview --base-pay-rate 25 --base-bill-rate 45 \\
        --ot-bill-multiplier 1.5 --reg-hours 40 --ot-hours 8
    python -m staffing_payroll.cli week --week-end 2026-01-10
    python -m staffing_payroll.cli init-db
"""

from __future__ import annotations

import argparse
import asyncio
import json
import math
import sys
from typing import Callable

from staffing_payroll.calculators import PreviewResult, RateInputs, compute_preview_rows
from staffing_payroll.config import configure_logging, get_settings
from staffing_payroll.database import create_schema, get_engine
from staffing_payroll.services.weekly_rollup import InvalidWeekEndError, resolve_week_window

PREVIEW_BANNER = "PREVIEW ONLY - NOT INVOICE - NOT SNAPSHOT"


def _finite_float(s: str) -> float:
    try:
        value = float(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {s!r}")
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"must be finite: {s!r}")
    return value


def non_negative_float(s: str) -> float:
    """Parse a finite number >= 0."""
    value = _finite_float(s)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0: {s!r}")
    return value


def positive_float(s: str) -> float:
    """Parse a finite number > 0."""
    value = _finite_float(s)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0: {s!r}")
    return value


def format_preview_table(result: PreviewResult) -> str:
    """Render preview rows and a totals row as fixed-width text."""
    header = (
        f"{'Bucket':<10}{'Hours':>9}{'Pay x':>7}{'Pay Rate':>10}{'Pay':>12}"
        f"{'Bill x':>8}{'Bill Rate':>11}{'Bill':>12}"
    )
    lines = [PREVIEW_BANNER, header, "-" * len(header)]
    for row in result.rows:
        lines.append(
            f"{row.bucket.value:<10}{row.hours:>9.2f}{row.pay_multiplier:>7.2f}"
            f"{row.effective_pay_rate:>10.2f}{row.pay_amount:>12.2f}"
            f"{row.bill_multiplier:>8.2f}{row.effective_bill_rate:>11.2f}"
            f"{row.bill_amount:>12.2f}"
        )
    lines.append("-" * len(header))
    lines.append(
        f"{'TOTAL':<10}{result.total_hours:>9.2f}{'':>7}{'':>10}{result.total_pay:>12.2f}"
        f"{'':>8}{'':>11}{result.total_bill:>12.2f}"
    )
    return "\n".join(lines)


class PayrollCli:
    """Staffing payroll Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m staffing_payroll.cli",
            description="Staffing payroll tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # preview command
        preview = subparsers.add_parser(
            "preview",
            help="Compute a payroll/billing money preview",
        )
        for flag, help_text in (
            ("--base-pay-rate", "Base pay rate per hour"),
            ("--base-bill-rate", "Base bill rate per hour"),
        ):
            preview.add_argument(flag, type=non_negative_float, required=True, help=help_text)
        preview.add_argument(
            "--ot-bill-multiplier",
            type=positive_float,
            required=True,
            help="Overtime billing multiplier (DT billing is derived as OT x 4/3)",
        )
        for flag, help_text in (
            ("--sd-pay-delta-rate", "Shift differential pay delta per hour"),
            ("--sd-bill-delta-rate", "Shift differential bill delta per hour"),
            ("--reg-hours", "Regular hours"),
            ("--ot-hours", "Overtime hours"),
            ("--dt-hours", "Double-time hours"),
            ("--reg-sd-hours", "Regular shift differential hours"),
            ("--ot-sd-hours", "Overtime shift differential hours"),
            ("--dt-sd-hours", "Double-time shift differential hours"),
        ):
            preview.add_argument(
                flag,
                type=non_negative_float,
                default=0.0,
                help=f"{help_text} (default: 0)",
            )
        preview.add_argument(
            "--json",
            action="store_true",
            help="Print the result as JSON",
        )

        # week command
        week = subparsers.add_parser(
            "week",
            help="Show the payroll week window containing a date",
        )
        week.add_argument(
            "--week-end",
            type=str,
            required=True,
            help="YYYY-MM-DD local payroll date",
        )
        week.add_argument(
            "--timezone",
            type=str,
            help="Payroll timezone (default: $PAYROLL_TIMEZONE)",
        )

        # init-db command
        init_db = subparsers.add_parser(
            "init-db",
            help="Create missing tables",
        )
        init_db.add_argument(
            "--database-url",
            type=str,
            help="Database URL (default: $DATABASE_URL)",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[..., int]] = {
            "preview": self._cmd_preview,
            "week": self._cmd_week,
            "init-db": self._cmd_init_db,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    def _cmd_preview(self, args: argparse.Namespace) -> int:
        """Print a money preview."""
        inputs = RateInputs(
            base_pay_rate=args.base_pay_rate,
            base_bill_rate=args.base_bill_rate,
            ot_bill_multiplier=args.ot_bill_multiplier,
            sd_pay_delta_rate=args.sd_pay_delta_rate,
            sd_bill_delta_rate=args.sd_bill_delta_rate,
            reg_hours=args.reg_hours,
            ot_hours=args.ot_hours,
            dt_hours=args.dt_hours,
            reg_sd_hours=args.reg_sd_hours,
            ot_sd_hours=args.ot_sd_hours,
            dt_sd_hours=args.dt_sd_hours,
        )
        result = compute_preview_rows(inputs)

        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
        else:
            print(format_preview_table(result))
        return 0

    def _cmd_week(self, args: argparse.Namespace) -> int:
        """Print the week window."""
        tz_name = args.timezone or get_settings().payroll_timezone
        try:
            window = resolve_week_window(args.week_end, tz_name)
        except InvalidWeekEndError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        print(f"Week: {window.week_start} .. {window.week_end} ({window.timezone})")
        print(f"  UTC start: {window.start_utc.isoformat()}")
        print(f"  UTC end (exclusive): {window.end_utc.isoformat()}")
        return 0

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create the schema."""
        configure_logging()
        tables = asyncio.run(self._create_schema(args.database_url))
        print(f"Created or verified {len(tables)} tables: {', '.join(tables)}")
        return 0

    async def _create_schema(self, database_url: str | None) -> list[str]:
        engine = get_engine(database_url)
        try:
            return await create_schema(engine)
        finally:
            await engine.dispose()


def main() -> int:
    """CLI entry point."""
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
