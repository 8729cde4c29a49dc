"""Audit log and notification text for entry status changes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from piece_payroll.calculators.types import EntryStatus


class EntryType(str, Enum):
    """Kind of work entry a message refers to."""

    TIME = "time"
    PRODUCTION = "production"


ENTRY_TYPE_LABELS = {
    EntryType.TIME: "Timesheet",
    EntryType.PRODUCTION: "Production Entry",
}


@dataclass(frozen=True)
class Notification:
    """Rendered notification for a status change."""

    subject: str
    body: str


def _text(value: str) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def get_audit_message(
    from_status: str,
    to_status: str,
    user_name: str,
    comments: str | None = None,
) -> str:
    """Build the audit log line for a status change."""
    message = (
        f"Status changed from '{_text(from_status)}' to '{_text(to_status)}' by {user_name}"
    )
    if comments:
        message += f" - Comments: {comments}"
    return message


def get_notification_message(
    from_status: str,
    to_status: str,
    entry_type: str,
    worker_name: str,
    entry_date: str,
    approver_name: str | None = None,
    comments: str | None = None,
) -> Notification:
    """Build the notification sent after a status change.

    Any entry type other than time is labelled as a production entry, and
    statuses without a dedicated template get the generic status-change text.
    """
    label = ENTRY_TYPE_LABELS[
        EntryType.TIME if _text(entry_type) == EntryType.TIME.value else EntryType.PRODUCTION
    ]
    target = _text(to_status)

    if target == EntryStatus.APPROVED.value:
        lines = [
            f"Your {label.lower()} for {worker_name} on {entry_date} "
            f"has been approved by {approver_name}.",
            "",
            "You can now proceed with payroll processing for this entry.",
        ]
        if comments:
            lines += ["", f"Comments: {comments}"]
        return Notification(
            subject=f"{label} Approved - {worker_name} - {entry_date}",
            body="\n".join(lines),
        )

    if target == EntryStatus.REJECTED.value:
        return Notification(
            subject=f"{label} Rejected - {worker_name} - {entry_date}",
            body="\n".join(
                [
                    f"Your {label.lower()} for {worker_name} on {entry_date} "
                    f"has been rejected by {approver_name}.",
                    "",
                    f"Reason: {comments or 'No reason provided'}",
                    "",
                    "Please review and resubmit with corrections.",
                ]
            ),
        )

    if target == EntryStatus.LOCKED.value:
        return Notification(
            subject=f"{label} Locked - {worker_name} - {entry_date}",
            body="\n".join(
                [
                    f"The {label.lower()} for {worker_name} on {entry_date} "
                    "has been locked after payroll processing.",
                    "",
                    "This entry is now read-only and cannot be modified.",
                ]
            ),
        )

    return Notification(
        subject=f"{label} Status Changed - {worker_name}",
        body=f"Status changed from {_text(from_status)} to {_text(to_status)}",
    )
