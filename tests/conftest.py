"""Pytest fixtures for piece-rate payroll tests."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from itertools import count

import pytest

from piece_payroll.calculators.engine import PayrollEngine
from piece_payroll.calculators.types import (
    EmployeeType,
    EntryStatus,
    PayItem,
    ProductionEntry,
    Rate,
    TimeEntry,
    Worker,
)
from piece_payroll.config import Settings

PERIOD_START = "2026-01-26"
PERIOD_END = "2026-02-01"

_ids = count(1)


def make_time_entry(
    hours: str | Decimal,
    status: EntryStatus = EntryStatus.APPROVED,
    worker_id: str = "worker-1",
    entry_date: str = "2026-01-27",
) -> TimeEntry:
    """Build a time entry with a unique id."""
    return TimeEntry(
        id=f"time-{next(_ids)}",
        worker_id=worker_id,
        entry_date=entry_date,
        total_hours=Decimal(hours),
        status=status,
    )


def make_production_entry(
    quantity: str | Decimal,
    status: EntryStatus = EntryStatus.APPROVED,
    worker_id: str = "worker-1",
    entry_date: str = "2026-01-27",
    pay_item_id: str = "pay-item-1",
) -> ProductionEntry:
    """Build a production entry with a unique id."""
    return ProductionEntry(
        id=f"prod-{next(_ids)}",
        worker_id=worker_id,
        entry_date=entry_date,
        pay_item_id=pay_item_id,
        quantity=Decimal(quantity),
        status=status,
    )


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the process environment."""
    return Settings(engine_version="1.0.0", strict_rates=False, log_level="INFO")


@pytest.fixture
def engine(settings) -> PayrollEngine:
    """Engine in default (lenient) mode."""
    return PayrollEngine(settings=settings)


@pytest.fixture
def strict_engine(settings) -> PayrollEngine:
    """Engine reporting skipped production entries."""
    return PayrollEngine(strict=True, settings=settings)


@pytest.fixture
def w2_worker() -> Worker:
    """W2 worker: $18/hr, 1.5x OT, minimum guarantee, piece rate enabled."""
    return Worker(
        id="worker-1",
        worker_code="W001",
        full_name="John Silva",
        employee_type=EmployeeType.W2,
        base_hourly_rate=Decimal("18.00"),
        ot_multiplier=Decimal("1.5"),
        min_hourly_guarantee=True,
        piece_rate_enabled=True,
        crew="Crew A",
    )


@pytest.fixture
def contractor_worker(w2_worker) -> Worker:
    """1099 contractor: no OT premium, no guarantee."""
    return replace(
        w2_worker,
        id="worker-2",
        worker_code="W002",
        full_name="Carlos Mendes",
        employee_type=EmployeeType.CONTRACTOR_1099,
        ot_multiplier=Decimal("1.0"),
        min_hourly_guarantee=False,
    )


@pytest.fixture
def hourly_worker(w2_worker) -> Worker:
    """W2 worker paid hourly only."""
    return replace(
        w2_worker,
        id="worker-3",
        worker_code="W003",
        full_name="Ana Costa",
        min_hourly_guarantee=False,
        piece_rate_enabled=False,
    )


@pytest.fixture
def pay_item() -> PayItem:
    return PayItem(
        id="pay-item-1",
        item_code="HDD_FT",
        description="Horizontal Directional Drilling",
        unit="FT",
        category="Installation",
    )


@pytest.fixture
def rate() -> Rate:
    return Rate(
        id="rate-1",
        pay_item_id="pay-item-1",
        rate_amount=Decimal("0.85"),
        effective_from="2026-01-01",
        effective_to=None,
        context_notes="Urban HDD standard",
    )


@pytest.fixture
def catalog(pay_item, rate):
    """(pay_items, rates) pair for calculate_worker calls."""
    return [pay_item], [rate]
