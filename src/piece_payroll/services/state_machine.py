"""Approval workflow state machine with role-gated transitions."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from piece_payroll.calculators.types import EntryStatus
from piece_payroll.exceptions import InvalidTransitionError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Roles that act on work entries."""

    SUPERVISOR = "supervisor"
    MANAGER = "manager"
    OWNER = "owner"


class TransitionErrorKind(str, Enum):
    """Why a transition request was refused."""

    ENTRY_LOCKED = "entry_locked"
    ILLEGAL_TRANSITION = "illegal_transition"
    UNAUTHORIZED_ROLE = "unauthorized_role"
    COMMENT_REQUIRED = "comment_required"


@dataclass(frozen=True)
class TransitionResult:
    """Verdict for a transition request."""

    success: bool
    error: str | None = None
    error_kind: TransitionErrorKind | None = None
    warnings: tuple[str, ...] = ()

    @classmethod
    def ok(cls, warnings: Iterable[str] = ()) -> TransitionResult:
        return cls(success=True, warnings=tuple(warnings))

    @classmethod
    def fail(cls, kind: TransitionErrorKind, error: str) -> TransitionResult:
        return cls(success=False, error=error, error_kind=kind)

    def raise_for_error(self, from_status: str, to_status: str) -> None:
        """Raise InvalidTransitionError if this verdict is a failure."""
        if not self.success:
            raise InvalidTransitionError(
                _text(from_status), _text(to_status), kind=self.error_kind, reason=self.error
            )


@dataclass(frozen=True)
class AvailableAction:
    """A next status a role may move an entry to."""

    action: EntryStatus
    label: str
    requires_comments: bool


@dataclass
class BatchApprovalResult:
    """Partition of a batch into approvable and refused entries."""

    valid_ids: list[str] = field(default_factory=list)
    invalid_ids: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)  # entry_id -> reason


def _status(value: str) -> EntryStatus | None:
    try:
        return EntryStatus(value)
    except ValueError:
        return None


def _text(value: str) -> str:
    """Plain string for messages, whether given an enum member or a str."""
    return value.value if isinstance(value, Enum) else str(value)


class ApprovalStateMachine:
    """State machine for time and production entry approval.

    Allowed transitions:
    - pending → approved (manager, owner)
    - pending → rejected (manager, owner; comment required)
    - approved → locked (owner)
    - rejected → pending (supervisor, manager, owner; resubmission)

    locked is terminal. Every operation here consults the same two tables.
    """

    VALID_TRANSITIONS: Mapping[EntryStatus, tuple[EntryStatus, ...]] = MappingProxyType(
        {
            EntryStatus.PENDING: (EntryStatus.APPROVED, EntryStatus.REJECTED),
            EntryStatus.APPROVED: (EntryStatus.LOCKED,),
            EntryStatus.REJECTED: (EntryStatus.PENDING,),
            EntryStatus.LOCKED: (),  # Terminal state
        }
    )

    ROLE_PERMISSIONS: Mapping[tuple[EntryStatus, EntryStatus], tuple[Role, ...]] = MappingProxyType(
        {
            (EntryStatus.PENDING, EntryStatus.APPROVED): (Role.MANAGER, Role.OWNER),
            (EntryStatus.PENDING, EntryStatus.REJECTED): (Role.MANAGER, Role.OWNER),
            (EntryStatus.APPROVED, EntryStatus.LOCKED): (Role.OWNER,),
            (EntryStatus.REJECTED, EntryStatus.PENDING): (
                Role.SUPERVISOR,
                Role.MANAGER,
                Role.OWNER,
            ),
        }
    )

    STATUS_LABELS: Mapping[EntryStatus, str] = MappingProxyType(
        {
            EntryStatus.PENDING: "Pending Approval",
            EntryStatus.APPROVED: "Approved",
            EntryStatus.REJECTED: "Rejected",
            EntryStatus.LOCKED: "Locked (Payroll Processed)",
        }
    )

    ACTION_LABELS: Mapping[EntryStatus, str] = MappingProxyType(
        {
            EntryStatus.PENDING: "Submit for Approval",
            EntryStatus.APPROVED: "Approve",
            EntryStatus.REJECTED: "Reject",
            EntryStatus.LOCKED: "Lock",
        }
    )

    # Statuses whose entries may be edited before locking
    EDITABLE_BY_REVIEWERS = frozenset({EntryStatus.PENDING, EntryStatus.REJECTED})

    @classmethod
    def get_next_statuses(cls, current_status: str) -> tuple[EntryStatus, ...]:
        """Get valid next statuses from current status."""
        status = _status(current_status)
        if status is None:
            return ()
        return cls.VALID_TRANSITIONS[status]

    @classmethod
    def get_allowed_roles(cls, from_status: str, to_status: str) -> tuple[Role, ...]:
        """Get roles permitted to perform a transition (empty if illegal)."""
        source, target = _status(from_status), _status(to_status)
        if source is None or target is None:
            return ()
        return cls.ROLE_PERMISSIONS.get((source, target), ())

    @classmethod
    def can_transition(cls, from_status: str, to_status: str, role: str) -> TransitionResult:
        """Check the transition table and role table only."""
        allowed = cls.get_next_statuses(from_status)
        if _status(to_status) not in allowed:
            allowed_str = ", ".join(s.value for s in allowed) or "none"
            return TransitionResult.fail(
                TransitionErrorKind.ILLEGAL_TRANSITION,
                f"Cannot transition from '{_text(from_status)}' to '{_text(to_status)}'. "
                f"Allowed: {allowed_str}",
            )

        allowed_roles = cls.get_allowed_roles(from_status, to_status)
        if role not in allowed_roles:
            required = ", ".join(sorted(r.value for r in allowed_roles))
            return TransitionResult.fail(
                TransitionErrorKind.UNAUTHORIZED_ROLE,
                f"Role '{_text(role)}' is not authorized to transition from "
                f"'{_text(from_status)}' to '{_text(to_status)}'. Required: {required}",
            )

        return TransitionResult.ok()

    @classmethod
    def validate_transition(
        cls,
        current_status: str,
        new_status: str,
        role: str,
        comments: str | None = None,
        entry_count: int = 1,
    ) -> TransitionResult:
        """Validate a transition request.

        Checks, in order: locked guard, transition table, role table and
        the rejection comment. Never raises.
        """
        if _status(current_status) is EntryStatus.LOCKED:
            result = TransitionResult.fail(
                TransitionErrorKind.ENTRY_LOCKED,
                "Locked entries cannot be modified. Contact system administrator.",
            )
        else:
            result = cls.can_transition(current_status, new_status, role)

        if result.success and _status(new_status) is EntryStatus.REJECTED:
            if not (comments or "").strip():
                result = TransitionResult.fail(
                    TransitionErrorKind.COMMENT_REQUIRED,
                    "Comments are required when rejecting an entry",
                )

        if not result.success:
            logger.debug(
                "Refused transition %s -> %s for role %s: %s",
                _text(current_status),
                _text(new_status),
                _text(role),
                _text(result.error_kind),
            )
            return result

        if _status(new_status) is EntryStatus.LOCKED:
            return TransitionResult.ok([cls._lock_warning(entry_count)])
        return result

    @classmethod
    def validate_batch_approval(
        cls,
        entries: Iterable[tuple[str, str]],
        role: str,
    ) -> BatchApprovalResult:
        """Partition (entry_id, status) pairs by whether they can be approved.

        Partial success is expected; callers apply the valid subset.
        """
        batch = BatchApprovalResult()

        for entry_id, status in entries:
            result = cls.validate_transition(status, EntryStatus.APPROVED, role)
            if result.success:
                batch.valid_ids.append(entry_id)
            else:
                batch.invalid_ids.append(entry_id)
                batch.errors[entry_id] = result.error or "Unknown error"

        return batch

    @classmethod
    def lock_entries(cls, entry_ids: Iterable[str], role: str) -> TransitionResult:
        """Check a bulk lock after payroll is processed. Owner only."""
        if role != Role.OWNER:
            return TransitionResult.fail(
                TransitionErrorKind.UNAUTHORIZED_ROLE,
                "Only owners can lock entries",
            )

        return TransitionResult.ok([cls._lock_warning(len(list(entry_ids)))])

    @classmethod
    def get_available_actions(cls, current_status: str, role: str) -> list[AvailableAction]:
        """Get the transitions a role may invoke from a status."""
        actions: list[AvailableAction] = []

        for next_status in cls.get_next_statuses(current_status):
            if role in cls.get_allowed_roles(current_status, next_status):
                actions.append(
                    AvailableAction(
                        action=next_status,
                        label=cls.ACTION_LABELS[next_status],
                        requires_comments=next_status is EntryStatus.REJECTED,
                    )
                )

        return actions

    @classmethod
    def can_edit(cls, status: str, role: str, is_own_entry: bool = True) -> bool:
        """Check if a role may edit an entry in this status."""
        entry_status = _status(status)
        if entry_status is None or entry_status is EntryStatus.LOCKED:
            return False

        # Supervisors may edit their own pending entries
        if role == Role.SUPERVISOR:
            return entry_status is EntryStatus.PENDING and is_own_entry

        if role in (Role.MANAGER, Role.OWNER) and entry_status in cls.EDITABLE_BY_REVIEWERS:
            return True

        # Pre-lock correction window
        return role == Role.OWNER and entry_status is EntryStatus.APPROVED

    @classmethod
    def can_delete(cls, status: str, role: str) -> bool:
        """Check if a role may delete an entry. Owner only, never locked."""
        entry_status = _status(status)
        if entry_status is None or entry_status is EntryStatus.LOCKED:
            return False
        return role == Role.OWNER

    @classmethod
    def get_status_label(cls, status: str) -> str:
        """Get human-readable status label."""
        entry_status = _status(status)
        if entry_status is None:
            return _text(status)
        return cls.STATUS_LABELS[entry_status]

    @staticmethod
    def _lock_warning(count: int) -> str:
        noun = "entry" if count == 1 else "entries"
        return f"Locking {count} {noun}. These entries will become read-only."
