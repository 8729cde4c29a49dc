"""Pay item rate resolution with effective dating."""

from __future__ import annotations

from collections.abc import Iterable

from piece_payroll.calculators.types import Rate


class RateResolver:
    """Resolves the rate applicable to a pay item on a given date.

    Rate selection:
    1. Candidates must match the pay item and cover the entry date
       (effective_from <= date, effective_to null or >= date)
    2. Latest effective_from wins when windows overlap
    3. Ties go to the rate listed first in the rate table

    The resolver holds its own copy of the rate table so results do not
    depend on later changes to the caller's list.
    """

    def __init__(self, rates: Iterable[Rate]):
        self.rates: tuple[Rate, ...] = tuple(rates)

    def resolve(self, pay_item_id: str, entry_date: str) -> Rate | None:
        """Resolve the rate for a pay item on an ISO date.

        Returns:
            The applicable rate, or None if no rate covers the date
        """
        candidates = self.get_candidate_rates(pay_item_id, entry_date)
        if not candidates:
            return None

        best_rate: Rate | None = None
        for rate in candidates:
            # Strict comparison keeps the earliest-listed rate on ties
            if best_rate is None or rate.effective_from > best_rate.effective_from:
                best_rate = rate

        return best_rate

    def get_candidate_rates(self, pay_item_id: str, entry_date: str) -> list[Rate]:
        """Get all rates for a pay item effective on a date, in table order."""
        return [
            rate
            for rate in self.rates
            if rate.pay_item_id == pay_item_id and rate.is_effective_on(entry_date)
        ]
