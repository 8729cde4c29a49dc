"""Payroll calculation engine."""

from piece_payroll.calculators.engine import PayrollEngine
from piece_payroll.calculators.line_builder import LineItemBuilder
from piece_payroll.calculators.rate_resolver import RateResolver

__all__ = [
    "PayrollEngine",
    "LineItemBuilder",
    "RateResolver",
]
