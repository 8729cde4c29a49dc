"""Piece-rate payroll engine.

Deterministic pay calculation for workers paid by a mix of hourly wages and
per-unit piece rates, plus the approval workflow that decides which time and
production entries are eligible.
"""

from piece_payroll.calculators import LineItemBuilder, PayrollEngine, RateResolver
from piece_payroll.calculators.types import (
    EmployeeType,
    EntryStatus,
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
from piece_payroll.services import ApprovalStateMachine, Role, TransitionErrorKind

__version__ = "1.0.0"

__all__ = [
    "ApprovalStateMachine",
    "EmployeeType",
    "EntryStatus",
    "LineItemBuilder",
    "PayItem",
    "PaymentMethod",
    "PayrollEngine",
    "PayrollResult",
    "PayrollSummary",
    "ProductionEntry",
    "ProductionLineItem",
    "Rate",
    "RateResolver",
    "Role",
    "TimeEntry",
    "TransitionErrorKind",
    "ValidationReport",
    "Worker",
]
