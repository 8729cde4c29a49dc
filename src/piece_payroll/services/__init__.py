"""Approval workflow services."""

from piece_payroll.services.notifications import (
    Notification,
    get_audit_message,
    get_notification_message,
)
from piece_payroll.services.state_machine import (
    ApprovalStateMachine,
    AvailableAction,
    BatchApprovalResult,
    Role,
    TransitionErrorKind,
    TransitionResult,
)

__all__ = [
    "ApprovalStateMachine",
    "AvailableAction",
    "BatchApprovalResult",
    "Role",
    "TransitionErrorKind",
    "TransitionResult",
    "Notification",
    "get_audit_message",
    "get_notification_message",
]
