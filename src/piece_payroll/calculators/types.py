"""Type definitions for calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class EntryStatus(str, Enum):
    """Approval status of a time or production entry."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    LOCKED = "locked"


# Only these statuses feed a calculation
PAYABLE_STATUSES = frozenset({EntryStatus.APPROVED, EntryStatus.LOCKED})


class EmployeeType(str, Enum):
    """Employment classification."""

    W2 = "W2"
    CONTRACTOR_1099 = "1099"


class PaymentMethod(str, Enum):
    """Display label describing how a worker's pay was made up."""

    PIECE_RATE_OT = "Piece Rate + OT"
    PIECE_RATE_MIN_GUARANTEE = "Piece Rate + Min Guarantee"
    PIECE_RATE = "Piece Rate"
    HOURLY_OT = "Hourly + OT"
    HOURLY_ONLY = "Hourly Only"


@dataclass(frozen=True)
class Worker:
    """Worker pay configuration."""

    id: str
    full_name: str
    employee_type: EmployeeType
    base_hourly_rate: Decimal
    ot_multiplier: Decimal = Decimal("1.0")  # 1.0 = no overtime premium
    min_hourly_guarantee: bool = False
    piece_rate_enabled: bool = False
    active: bool = True
    worker_code: str | None = None
    crew: str | None = None


@dataclass(frozen=True)
class TimeEntry:
    """Hours worked on a single day."""

    id: str
    worker_id: str
    entry_date: str  # YYYY-MM-DD
    total_hours: Decimal
    status: EntryStatus = EntryStatus.PENDING
    notes: str | None = None


@dataclass(frozen=True)
class ProductionEntry:
    """Units of piece-rate work completed on a single day."""

    id: str
    worker_id: str
    entry_date: str  # YYYY-MM-DD
    pay_item_id: str
    quantity: Decimal
    status: EntryStatus = EntryStatus.PENDING
    notes: str | None = None


@dataclass(frozen=True)
class PayItem:
    """Catalog row for a unit of piece-rate work."""

    id: str
    item_code: str
    description: str
    unit: str
    category: str | None = None
    active: bool = True


@dataclass(frozen=True)
class Rate:
    """Effective-dated price for a pay item.

    Both bounds are inclusive; effective_to=None means open-ended.
    """

    id: str
    pay_item_id: str
    rate_amount: Decimal
    effective_from: str
    effective_to: str | None = None
    context_notes: str | None = None

    def is_effective_on(self, entry_date: str) -> bool:
        """Check whether this rate covers the given ISO date."""
        if self.effective_from > entry_date:
            return False
        return self.effective_to is None or self.effective_to >= entry_date


@dataclass(frozen=True)
class ProductionLineItem:
    """One priced production entry, as applied in a result."""

    entry_id: str
    pay_item_code: str
    pay_item_description: str
    quantity: Decimal
    unit: str
    rate: Decimal
    earnings: Decimal  # Rounded to cents
    rate_id: str
    rate_effective_from: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "pay_item_code": self.pay_item_code,
            "pay_item_description": self.pay_item_description,
            "quantity": str(self.quantity),
            "unit": self.unit,
            "rate": str(self.rate),
            "earnings": str(self.earnings),
            "rate_id": self.rate_id,
            "rate_effective_from": self.rate_effective_from,
        }


@dataclass(frozen=True)
class PayrollResult:
    """Calculated pay for one worker for one period."""

    worker_id: str
    worker_name: str
    employee_type: EmployeeType
    period_start: str
    period_end: str

    # Hours breakdown
    total_hours: Decimal
    regular_hours: Decimal
    ot_hours: Decimal

    # Earnings breakdown
    piece_earnings: Decimal
    hourly_earnings: Decimal
    ot_premium: Decimal
    min_guarantee_applied: Decimal

    total_pay: Decimal
    payment_method: PaymentMethod

    # Supporting data
    base_hourly_rate: Decimal
    ot_multiplier: Decimal
    production_items: tuple[ProductionLineItem, ...] = ()

    # Traceability
    calculation_id: UUID | None = None
    inputs_fingerprint: str = ""
    diagnostics: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-safe dict (amounts as strings)."""
        return {
            "worker_id": self.worker_id,
            "worker_name": self.worker_name,
            "employee_type": self.employee_type.value,
            "period_start": self.period_start,
            "period_end": self.period_end,
            "total_hours": str(self.total_hours),
            "regular_hours": str(self.regular_hours),
            "ot_hours": str(self.ot_hours),
            "piece_earnings": str(self.piece_earnings),
            "hourly_earnings": str(self.hourly_earnings),
            "ot_premium": str(self.ot_premium),
            "min_guarantee_applied": str(self.min_guarantee_applied),
            "total_pay": str(self.total_pay),
            "payment_method": self.payment_method.value,
            "base_hourly_rate": str(self.base_hourly_rate),
            "ot_multiplier": str(self.ot_multiplier),
            "production_items": [item.to_dict() for item in self.production_items],
            "calculation_id": str(self.calculation_id) if self.calculation_id else None,
            "inputs_fingerprint": self.inputs_fingerprint,
            "diagnostics": list(self.diagnostics),
        }


@dataclass(frozen=True)
class PayrollSummary:
    """Aggregate figures over a result set."""

    total_payroll: Decimal
    total_hours: Decimal
    total_workers: int
    avg_hourly_rate: Decimal
    total_ot_hours: Decimal
    total_piece_earnings: Decimal
    total_ot_premium: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_payroll": str(self.total_payroll),
            "total_hours": str(self.total_hours),
            "total_workers": self.total_workers,
            "avg_hourly_rate": str(self.avg_hourly_rate),
            "total_ot_hours": str(self.total_ot_hours),
            "total_piece_earnings": str(self.total_piece_earnings),
            "total_ot_premium": str(self.total_ot_premium),
        }


@dataclass
class ValidationReport:
    """Structural validity verdict for a result set."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0
