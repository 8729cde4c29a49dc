"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any
from uuid import UUID

from piece_payroll.calculators.line_builder import LineItemBuilder
from piece_payroll.calculators.rate_resolver import RateResolver
from piece_payroll.calculators.types import (
    PAYABLE_STATUSES,
    PayItem,
    PaymentMethod,
    PayrollResult,
    PayrollSummary,
    ProductionEntry,
    ProductionLineItem,
    Rate,
    TimeEntry,
    ValidationReport,
    Worker,
)
from piece_payroll.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Fixed weekly standard, not configurable per worker
OVERTIME_THRESHOLD_HOURS = Decimal("40")

# Allowed drift between an expected total and the calculated one
TOTAL_TOLERANCE = Decimal("0.01")

ZERO = Decimal("0")


class PayrollEngine:
    """Main payroll calculation engine.

    Calculation pipeline (stable order per worker):
    1) Sum hours from approved/locked time entries
    2) Split into regular hours (capped at 40) and overtime hours
    3) Price approved/locked production entries at their effective rate
    4) Hourly earnings = regular hours x base rate
    5) OT premium = OT hours x base rate x (multiplier - 1)
    6) Minimum guarantee: pay the greater of piece and hourly earnings
    7) Total pay = guaranteed base + OT premium
    8) Derive the payment method label

    Production entries whose pay item or rate cannot be found are skipped
    from earnings. In strict mode each skip is reported in the result's
    diagnostics; otherwise the result only lacks the line item.
    """

    def __init__(self, strict: bool | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.strict = self.settings.strict_rates if strict is None else strict

    def calculate_payroll(
        self,
        workers: Iterable[Worker],
        time_entries: Iterable[TimeEntry],
        production_entries: Iterable[ProductionEntry],
        pay_items: Iterable[PayItem],
        rates: Iterable[Rate],
        period_start: str,
        period_end: str,
    ) -> list[PayrollResult]:
        """Calculate pay for every active worker over a period.

        Entries are matched to workers by worker_id and to the period by
        inclusive ISO date comparison. Inactive workers produce no result.
        Results follow worker order.
        """
        time_by_worker: dict[str, list[TimeEntry]] = defaultdict(list)
        for entry in time_entries:
            if period_start <= entry.entry_date <= period_end:
                time_by_worker[entry.worker_id].append(entry)

        production_by_worker: dict[str, list[ProductionEntry]] = defaultdict(list)
        for entry in production_entries:
            if period_start <= entry.entry_date <= period_end:
                production_by_worker[entry.worker_id].append(entry)

        pay_item_lookup = self._build_pay_item_lookup(pay_items)
        resolver = RateResolver(rates)

        results: list[PayrollResult] = []
        skipped = 0
        for worker in workers:
            if not worker.active:
                skipped += 1
                continue

            results.append(
                self._calculate_worker(
                    worker,
                    time_by_worker.get(worker.id, []),
                    production_by_worker.get(worker.id, []),
                    pay_item_lookup,
                    resolver,
                    period_start,
                    period_end,
                )
            )

        logger.info(
            "Calculated payroll for %d worker(s) from %s to %s (%d inactive skipped)",
            len(results),
            period_start,
            period_end,
            skipped,
        )
        return results

    def calculate_worker(
        self,
        worker: Worker,
        time_entries: Iterable[TimeEntry],
        production_entries: Iterable[ProductionEntry],
        pay_items: Iterable[PayItem],
        rates: Iterable[Rate],
        period_start: str,
        period_end: str,
    ) -> PayrollResult:
        """Calculate pay for a single worker.

        The entries are expected to be restricted to the worker and period
        already; status filtering is always applied here.
        """
        return self._calculate_worker(
            worker,
            list(time_entries),
            list(production_entries),
            self._build_pay_item_lookup(pay_items),
            RateResolver(rates),
            period_start,
            period_end,
        )

    def _calculate_worker(
        self,
        worker: Worker,
        time_entries: Sequence[TimeEntry],
        production_entries: Sequence[ProductionEntry],
        pay_item_lookup: dict[str, PayItem],
        resolver: RateResolver,
        period_start: str,
        period_end: str,
    ) -> PayrollResult:
        inputs_data: list[dict[str, Any]] = []
        diagnostics: list[str] = []

        # 1) Hours from approved time
        total_hours = ZERO
        for entry in time_entries:
            if entry.status not in PAYABLE_STATUSES:
                continue
            total_hours += entry.total_hours
            inputs_data.append(
                {
                    "type": "time_entry",
                    "id": entry.id,
                    "entry_date": entry.entry_date,
                    "total_hours": str(entry.total_hours),
                }
            )

        # 2) Regular / overtime split
        regular_hours = min(total_hours, OVERTIME_THRESHOLD_HOURS)
        ot_hours = max(total_hours - OVERTIME_THRESHOLD_HOURS, ZERO)

        # 3) Piece earnings from approved production
        piece_earnings = ZERO
        lines: list[ProductionLineItem] = []
        for entry in production_entries:
            if entry.status not in PAYABLE_STATUSES:
                continue

            pay_item = pay_item_lookup.get(entry.pay_item_id)
            if pay_item is None:
                self._record_skip(
                    diagnostics,
                    f"Production entry {entry.id} skipped: "
                    f"pay item {entry.pay_item_id} not found",
                )
                continue

            rate = resolver.resolve(entry.pay_item_id, entry.entry_date)
            if rate is None:
                self._record_skip(
                    diagnostics,
                    f"Production entry {entry.id} skipped: no rate for "
                    f"{pay_item.item_code} effective on {entry.entry_date}",
                )
                continue

            piece_earnings += LineItemBuilder.compute_earnings(entry, rate)
            lines.append(LineItemBuilder.create_production_line(entry, pay_item, rate))
            inputs_data.append(
                {
                    "type": "production_entry",
                    "id": entry.id,
                    "entry_date": entry.entry_date,
                    "pay_item_id": entry.pay_item_id,
                    "quantity": str(entry.quantity),
                    "rate_id": rate.id,
                    "rate_amount": str(rate.rate_amount),
                }
            )

        # 4) Hourly earnings on regular hours
        hourly_earnings = regular_hours * worker.base_hourly_rate

        # 5) OT premium; a 1.0 multiplier yields exactly zero
        ot_premium = ot_hours * worker.base_hourly_rate * (worker.ot_multiplier - 1)

        # 6) Minimum hourly guarantee
        guaranteed_pay = piece_earnings
        min_guarantee_applied = ZERO
        if worker.min_hourly_guarantee and hourly_earnings > piece_earnings:
            guaranteed_pay = hourly_earnings
            min_guarantee_applied = hourly_earnings - piece_earnings

        # 7) Total
        total_pay = guaranteed_pay + ot_premium

        # 8) Label
        # Uses unrounded figures; a sub-cent top-up still selects the
        # guarantee label while min_guarantee_applied emits as 0.00.
        payment_method = self.determine_payment_method(
            worker, piece_earnings, ot_hours, min_guarantee_applied
        )

        inputs_fingerprint = self._compute_inputs_fingerprint(worker, inputs_data)
        round_to_cents = LineItemBuilder.round_to_cents

        return PayrollResult(
            worker_id=worker.id,
            worker_name=worker.full_name,
            employee_type=worker.employee_type,
            period_start=period_start,
            period_end=period_end,
            total_hours=round_to_cents(total_hours),
            regular_hours=round_to_cents(regular_hours),
            ot_hours=round_to_cents(ot_hours),
            piece_earnings=round_to_cents(piece_earnings),
            hourly_earnings=round_to_cents(hourly_earnings),
            ot_premium=round_to_cents(ot_premium),
            min_guarantee_applied=round_to_cents(min_guarantee_applied),
            total_pay=round_to_cents(total_pay),
            payment_method=payment_method,
            base_hourly_rate=worker.base_hourly_rate,
            ot_multiplier=worker.ot_multiplier,
            production_items=tuple(lines),
            calculation_id=self._generate_calculation_id(
                worker.id, period_start, period_end, inputs_fingerprint
            ),
            inputs_fingerprint=inputs_fingerprint,
            diagnostics=tuple(diagnostics),
        )

    @staticmethod
    def determine_payment_method(
        worker: Worker,
        piece_earnings: Decimal,
        ot_hours: Decimal,
        min_guarantee_applied: Decimal,
    ) -> PaymentMethod:
        """Derive the display label; first matching rule wins."""
        if worker.piece_rate_enabled and piece_earnings > 0:
            if ot_hours > 0:
                return PaymentMethod.PIECE_RATE_OT
            if min_guarantee_applied > 0:
                return PaymentMethod.PIECE_RATE_MIN_GUARANTEE
            return PaymentMethod.PIECE_RATE
        if ot_hours > 0:
            return PaymentMethod.HOURLY_OT
        return PaymentMethod.HOURLY_ONLY

    @staticmethod
    def calculate_total_payroll(results: Iterable[PayrollResult]) -> Decimal:
        """Sum total pay across results, rounded to cents."""
        return LineItemBuilder.round_to_cents(sum((r.total_pay for r in results), ZERO))

    @classmethod
    def generate_summary(cls, results: Sequence[PayrollResult]) -> PayrollSummary:
        """Aggregate a result set into payroll totals."""
        round_to_cents = LineItemBuilder.round_to_cents

        total_payroll = cls.calculate_total_payroll(results)
        total_hours = sum((r.total_hours for r in results), ZERO)
        total_ot_hours = sum((r.ot_hours for r in results), ZERO)
        total_piece_earnings = sum((r.piece_earnings for r in results), ZERO)
        total_ot_premium = sum((r.ot_premium for r in results), ZERO)

        avg_hourly_rate = total_payroll / total_hours if total_hours > 0 else ZERO

        return PayrollSummary(
            total_payroll=total_payroll,
            total_hours=round_to_cents(total_hours),
            total_workers=len(results),
            avg_hourly_rate=round_to_cents(avg_hourly_rate),
            total_ot_hours=round_to_cents(total_ot_hours),
            total_piece_earnings=round_to_cents(total_piece_earnings),
            total_ot_premium=round_to_cents(total_ot_premium),
        )

    @classmethod
    def validate_calculations(
        cls,
        results: Sequence[PayrollResult],
        expected_total: Decimal | int | str | None = None,
    ) -> ValidationReport:
        """Check a result set for structural problems.

        All problems are collected; the check never stops at the first one.
        """
        errors: list[str] = []

        for result in results:
            if result.total_pay < 0:
                errors.append(f"Worker {result.worker_name}: Negative total pay")
            if result.total_hours < 0:
                errors.append(f"Worker {result.worker_name}: Negative hours")

        if expected_total is not None:
            expected = Decimal(str(expected_total))
            calculated = cls.calculate_total_payroll(results)
            difference = abs(calculated - expected)

            if difference > TOTAL_TOLERANCE:
                errors.append(
                    f"Total mismatch: Expected ${expected:.2f}, "
                    f"got ${calculated:.2f} (diff: ${difference:.2f})"
                )

        return ValidationReport(valid=not errors, errors=errors)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _build_pay_item_lookup(pay_items: Iterable[PayItem]) -> dict[str, PayItem]:
        """Index the catalog by id; the first row for an id wins."""
        lookup: dict[str, PayItem] = {}
        for item in pay_items:
            lookup.setdefault(item.id, item)
        return lookup

    def _record_skip(self, diagnostics: list[str], message: str) -> None:
        logger.debug(message)
        if self.strict:
            diagnostics.append(message)

    def _generate_calculation_id(
        self,
        worker_id: str,
        period_start: str,
        period_end: str,
        inputs_fingerprint: str,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "worker_id": worker_id,
            "period_start": period_start,
            "period_end": period_end,
            "engine_version": self.settings.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    @staticmethod
    def _compute_inputs_fingerprint(
        worker: Worker, inputs_data: list[dict[str, Any]]
    ) -> str:
        """Compute fingerprint of the pay configuration and counted inputs."""
        data = {
            "worker": {
                "base_hourly_rate": str(worker.base_hourly_rate),
                "ot_multiplier": str(worker.ot_multiplier),
                "min_hourly_guarantee": worker.min_hourly_guarantee,
                "piece_rate_enabled": worker.piece_rate_enabled,
            },
            "inputs": inputs_data,
        }
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]
