"""Payroll Command Line Interface.

Provides operational tools for:
- Calculating a pay period from a JSON input document
- Summarising and validating the calculated results
- Checking approval transitions and available actions

Usage:
    python -m piece_payroll calculate input.json --period-start 2026-01-26 --period-end 2026-02-01
    python -m piece_payroll summary input.json --period-start 2026-01-26 --period-end 2026-02-01
    python -m piece_payroll validate input.json --period-start ... --period-end ... --expected-total 1512.00
    python -m piece_payroll actions --status pending --role manager
    python -m piece_payroll transition --from pending --to rejected --role owner --comments "Wrong crew"
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from piece_payroll.calculators.engine import PayrollEngine
from piece_payroll.calculators.types import EntryStatus, PayrollResult
from piece_payroll.config import get_settings
from piece_payroll.exceptions import PayrollInputError
from piece_payroll.schemas import load_payroll_input
from piece_payroll.services.state_machine import ApprovalStateMachine, Role

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(s: str) -> str:
    """Validate a YYYY-MM-DD date string."""
    if not _ISO_DATE.match(s):
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {s!r}")
    return s


def parse_decimal(s: str) -> Decimal:
    """Parse a currency amount."""
    try:
        return Decimal(s)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"not a number: {s!r}") from e


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


class PayrollCli:
    """Payroll Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m piece_payroll",
            description="Piece-rate payroll tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        for name, help_text in (
            ("calculate", "Calculate pay for every active worker"),
            ("summary", "Calculate and print payroll totals"),
            ("validate", "Calculate and validate the result set"),
        ):
            cmd = subparsers.add_parser(name, help=help_text)
            self._add_period_arguments(cmd)

        subparsers.choices["calculate"].add_argument(
            "--strict",
            action="store_true",
            help="Report production entries skipped for a missing rate or pay item",
        )
        subparsers.choices["validate"].add_argument(
            "--expected-total",
            type=parse_decimal,
            help="Expected payroll total to reconcile against (tolerance $0.01)",
        )

        # actions command
        actions = subparsers.add_parser(
            "actions",
            help="List transitions a role may perform from a status",
        )
        actions.add_argument(
            "--status",
            type=str,
            required=True,
            choices=[s.value for s in EntryStatus],
            help="Current entry status",
        )
        actions.add_argument(
            "--role",
            type=str,
            required=True,
            help="Acting role (supervisor, manager, owner)",
        )

        # transition command
        transition = subparsers.add_parser(
            "transition",
            help="Validate a single status transition",
        )
        transition.add_argument(
            "--from",
            dest="from_status",
            type=str,
            required=True,
            help="Current entry status",
        )
        transition.add_argument(
            "--to",
            dest="to_status",
            type=str,
            required=True,
            help="Requested entry status",
        )
        transition.add_argument(
            "--role",
            type=str,
            required=True,
            help="Acting role (supervisor, manager, owner)",
        )
        transition.add_argument(
            "--comments",
            type=str,
            help="Comment text (required when rejecting)",
        )
        transition.add_argument(
            "--entry-count",
            type=int,
            default=1,
            help="Number of entries affected (used in lock warnings)",
        )

        return parser

    @staticmethod
    def _add_period_arguments(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument("input", type=str, help="JSON input document")
        cmd.add_argument(
            "--period-start",
            type=parse_iso_date,
            required=True,
            help="First day of the period (YYYY-MM-DD, inclusive)",
        )
        cmd.add_argument(
            "--period-end",
            type=parse_iso_date,
            required=True,
            help="Last day of the period (YYYY-MM-DD, inclusive)",
        )

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[..., int]] = {
            "calculate": self._cmd_calculate,
            "summary": self._cmd_summary,
            "validate": self._cmd_validate,
            "actions": self._cmd_actions,
            "transition": self._cmd_transition,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except PayrollInputError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

    def _calculate(
        self, args: argparse.Namespace, strict: bool | None = None
    ) -> list[PayrollResult]:
        document = load_payroll_input(args.input)
        engine = PayrollEngine(strict=strict)
        return engine.calculate_payroll(
            document.workers_domain(),
            document.time_entries_domain(),
            document.production_entries_domain(),
            document.pay_items_domain(),
            document.rates_domain(),
            args.period_start,
            args.period_end,
        )

    def _cmd_calculate(self, args: argparse.Namespace) -> int:
        """Calculate and print results."""
        results = self._calculate(args, strict=True if args.strict else None)
        _print_json([r.to_dict() for r in results])
        return 0

    def _cmd_summary(self, args: argparse.Namespace) -> int:
        """Print aggregate totals."""
        results = self._calculate(args)
        _print_json(PayrollEngine.generate_summary(results).to_dict())
        return 0

    def _cmd_validate(self, args: argparse.Namespace) -> int:
        """Validate results, optionally against an expected total."""
        results = self._calculate(args)
        report = PayrollEngine.validate_calculations(results, args.expected_total)
        _print_json({"valid": report.valid, "errors": report.errors})
        return 0 if report.valid else 1

    def _cmd_actions(self, args: argparse.Namespace) -> int:
        """Print available actions."""
        actions = ApprovalStateMachine.get_available_actions(args.status, args.role)
        _print_json(
            [
                {
                    "action": a.action.value,
                    "label": a.label,
                    "requires_comments": a.requires_comments,
                }
                for a in actions
            ]
        )
        return 0

    def _cmd_transition(self, args: argparse.Namespace) -> int:
        """Validate a transition request."""
        if args.role not in {r.value for r in Role}:
            logger.warning("Unknown role %r; it holds no permissions", args.role)

        result = ApprovalStateMachine.validate_transition(
            args.from_status,
            args.to_status,
            args.role,
            comments=args.comments,
            entry_count=args.entry_count,
        )
        _print_json(
            {
                "success": result.success,
                "error": result.error,
                "error_kind": result.error_kind.value if result.error_kind else None,
                "warnings": list(result.warnings),
            }
        )
        return 0 if result.success else 1


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main() -> int:
    """CLI entry point."""
    configure_logging()
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
