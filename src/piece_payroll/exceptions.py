"""Exceptions raised at the edges of the payroll engine.

The calculation engine and state machine report problems as return values;
these are for callers that load inputs or prefer exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from piece_payroll.services.state_machine import TransitionErrorKind


class PayrollInputError(Exception):
    """Raised when an input document cannot be parsed or validated."""


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        from_status: str,
        to_status: str,
        kind: TransitionErrorKind | None = None,
        reason: str | None = None,
    ):
        self.from_status = from_status
        self.to_status = to_status
        self.kind = kind
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
