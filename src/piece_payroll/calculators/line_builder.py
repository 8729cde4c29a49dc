"""Production line items and currency rounding."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from piece_payroll.calculators.types import PayItem, ProductionEntry, ProductionLineItem, Rate


class LineItemBuilder:
    """Builds the audit ledger of priced production entries.

    Rounding:
    - Internal compute at full Decimal precision
    - USD and hours to 2 decimals when written into a result field
    - Sums are taken over unrounded amounts, never over rounded line items
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(LineItemBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def compute_earnings(entry: ProductionEntry, rate: Rate) -> Decimal:
        """Unrounded earnings for a production entry at a rate."""
        return entry.quantity * rate.rate_amount

    @staticmethod
    def create_production_line(
        entry: ProductionEntry,
        pay_item: PayItem,
        rate: Rate,
    ) -> ProductionLineItem:
        """Create a line item recording the exact rate applied to an entry."""
        earnings = LineItemBuilder.compute_earnings(entry, rate)
        return ProductionLineItem(
            entry_id=entry.id,
            pay_item_code=pay_item.item_code,
            pay_item_description=pay_item.description,
            quantity=entry.quantity,
            unit=pay_item.unit,
            rate=rate.rate_amount,
            earnings=LineItemBuilder.round_to_cents(earnings),
            rate_id=rate.id,
            rate_effective_from=rate.effective_from,
        )
