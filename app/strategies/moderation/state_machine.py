"""Publication state machine.

Pure transition rules for template moderation. Templates start pending;
an admin decision moves them to published or rejected, and both of those
are terminal:

PENDING --approve--> PUBLISHED
   |
   +------reject---> REJECTED
"""

import enum
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from app.db.models import AdminActionType, TemplateStatus
from app.interfaces.template import StateTransitionError

REJECTION_REASON_MIN_LENGTH = 10
REJECTION_REASON_MAX_LENGTH = 500


class PublicationAction(str, enum.Enum):
    """Moderation decisions an admin can take."""

    APPROVE = "approve"
    REJECT = "reject"

    @property
    def audit_type(self) -> AdminActionType:
        if self is PublicationAction.APPROVE:
            return AdminActionType.APPROVE_TEMPLATE
        return AdminActionType.REJECT_TEMPLATE


TRANSITIONS: Mapping[tuple[TemplateStatus, PublicationAction], TemplateStatus] = MappingProxyType(
    {
        (TemplateStatus.PENDING, PublicationAction.APPROVE): TemplateStatus.PUBLISHED,
        (TemplateStatus.PENDING, PublicationAction.REJECT): TemplateStatus.REJECTED,
    }
)


def next_status(current: TemplateStatus, action: PublicationAction) -> TemplateStatus:
    """Return the status reached by applying ``action`` in ``current``.

    Raises:
        StateTransitionError: If the action is not allowed in that status.
    """
    target = TRANSITIONS.get((TemplateStatus(current), action))
    if target is None:
        raise StateTransitionError(
            f"Cannot {action.value} template: status is '{TemplateStatus(current).value}', "
            f"expected '{TemplateStatus.PENDING.value}'",
            reason="invalid_state",
        )
    return target


def normalize_rejection_reason(reason: str) -> str:
    """Strip a rejection reason and check its length.

    Raises:
        StateTransitionError: If the stripped reason is outside the allowed length.
    """
    stripped = (reason or "").strip()
    if not REJECTION_REASON_MIN_LENGTH <= len(stripped) <= REJECTION_REASON_MAX_LENGTH:
        raise StateTransitionError(
            f"Rejection reason must be between {REJECTION_REASON_MIN_LENGTH} "
            f"and {REJECTION_REASON_MAX_LENGTH} characters",
            reason="invalid_reason",
        )
    return stripped


def approval_changes(is_verified: bool, is_featured: bool) -> dict[str, Any]:
    """Attributes written together with a PUBLISHED status."""
    return {"is_verified": is_verified, "is_featured": is_featured, "rejection_reason": None}


def rejection_changes(reason: str) -> dict[str, Any]:
    """Attributes written together with a REJECTED status."""
    return {"rejection_reason": reason}
