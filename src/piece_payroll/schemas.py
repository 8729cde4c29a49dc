"""Pydantic schemas for inbound payroll records."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from piece_payroll.calculators.types import (
    EmployeeType,
    EntryStatus,
    PayItem,
    ProductionEntry,
    Rate,
    TimeEntry,
    Worker,
)
from piece_payroll.exceptions import PayrollInputError

IsoDate = Annotated[str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$")]


class RecordBase(BaseModel):
    """Base schema for inbound records; unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)


# ============================================================================
# Reference data
# ============================================================================


class WorkerSchema(RecordBase):
    """Worker pay configuration."""

    id: str
    full_name: str
    employee_type: EmployeeType
    base_hourly_rate: Decimal = Field(ge=0)
    ot_multiplier: Decimal = Field(default=Decimal("1.0"), ge=1)
    min_hourly_guarantee: bool = False
    piece_rate_enabled: bool = False
    active: bool = True
    worker_code: str | None = None
    crew: str | None = None

    def to_domain(self) -> Worker:
        return Worker(**self.model_dump())


class PayItemSchema(RecordBase):
    """Pay item catalog row."""

    id: str
    item_code: str
    description: str
    unit: str
    category: str | None = None
    active: bool = True

    def to_domain(self) -> PayItem:
        return PayItem(**self.model_dump())


class RateSchema(RecordBase):
    """Effective-dated pay item rate."""

    id: str
    pay_item_id: str
    rate_amount: Decimal = Field(ge=0)
    effective_from: IsoDate
    effective_to: IsoDate | None = None
    context_notes: str | None = None

    def to_domain(self) -> Rate:
        return Rate(**self.model_dump())


# ============================================================================
# Work entries
# ============================================================================


class TimeEntrySchema(RecordBase):
    """Time entry."""

    id: str
    worker_id: str
    entry_date: IsoDate
    total_hours: Decimal = Field(ge=0)
    status: EntryStatus = EntryStatus.PENDING
    notes: str | None = None

    def to_domain(self) -> TimeEntry:
        return TimeEntry(**self.model_dump())


class ProductionEntrySchema(RecordBase):
    """Production entry."""

    id: str
    worker_id: str
    entry_date: IsoDate
    pay_item_id: str
    quantity: Decimal = Field(ge=0)
    status: EntryStatus = EntryStatus.PENDING
    notes: str | None = None

    def to_domain(self) -> ProductionEntry:
        return ProductionEntry(**self.model_dump())


# ============================================================================
# Input document
# ============================================================================


class PayrollInput(RecordBase):
    """Everything needed to calculate a pay period."""

    workers: list[WorkerSchema] = Field(default_factory=list)
    time_entries: list[TimeEntrySchema] = Field(default_factory=list)
    production_entries: list[ProductionEntrySchema] = Field(default_factory=list)
    pay_items: list[PayItemSchema] = Field(default_factory=list)
    rates: list[RateSchema] = Field(default_factory=list)

    def workers_domain(self) -> list[Worker]:
        return [w.to_domain() for w in self.workers]

    def time_entries_domain(self) -> list[TimeEntry]:
        return [e.to_domain() for e in self.time_entries]

    def production_entries_domain(self) -> list[ProductionEntry]:
        return [e.to_domain() for e in self.production_entries]

    def pay_items_domain(self) -> list[PayItem]:
        return [p.to_domain() for p in self.pay_items]

    def rates_domain(self) -> list[Rate]:
        return [r.to_domain() for r in self.rates]


def load_payroll_input(path: str | Path) -> PayrollInput:
    """Load and validate a JSON input document.

    Numbers are parsed as Decimal so currency figures keep their exact
    written value.

    Raises:
        PayrollInputError: If the file is missing, not JSON, or invalid
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise PayrollInputError(f"Cannot read input file {path}: {e}") from e

    try:
        data = json.loads(raw, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise PayrollInputError(f"Input file {path} is not valid JSON: {e}") from e

    try:
        return PayrollInput.model_validate(data)
    except ValidationError as e:
        raise PayrollInputError(f"Input file {path} failed validation:\n{e}") from e
