"""Template publisher.

Applies admin moderation decisions through the repository's conditional
status update. The caller's authorization is decided by the API layer
and passed in as a boolean.
"""

import logging
import uuid
from typing import Any

from app.db.models import AdminAction, Template, TemplateStatus
from app.interfaces.repository import BaseTemplateRepository
from app.interfaces.template import StateTransitionError
from app.strategies.moderation.state_machine import (
    PublicationAction,
    approval_changes,
    next_status,
    normalize_rejection_reason,
    rejection_changes,
)

logger = logging.getLogger(__name__)


class TemplatePublisher:
    """Moves templates through the publication state machine.

    Example:
        ```python
        publisher = TemplatePublisher(repository)
        template = await publisher.approve_template(
            template_id, admin.id, is_verified=True, authorized=True
        )
        ```
    """

    def __init__(self, repository: BaseTemplateRepository) -> None:
        self._repository = repository

    async def approve_template(
        self,
        template_id: uuid.UUID,
        admin_id: uuid.UUID,
        is_verified: bool = False,
        is_featured: bool = False,
        *,
        authorized: bool,
    ) -> Template:
        """Publish a pending template.

        Args:
            template_id: Template to publish.
            admin_id: Admin taking the decision, recorded in the audit row.
            is_verified: Mark the template as verified.
            is_featured: Mark the template as featured.
            authorized: Whether the caller holds the moderation permission.

        Returns:
            The published template.

        Raises:
            StateTransitionError: If the caller is not authorized, the
                template does not exist, or it is not pending.
        """
        self._check_authorized(template_id, admin_id, PublicationAction.APPROVE, authorized)

        return await self._apply(
            template_id,
            admin_id,
            PublicationAction.APPROVE,
            changes=approval_changes(is_verified, is_featured),
            details={"is_verified": is_verified, "is_featured": is_featured},
        )

    async def reject_template(
        self,
        template_id: uuid.UUID,
        admin_id: uuid.UUID,
        reason: str,
        *,
        authorized: bool,
    ) -> Template:
        """Reject a pending template.

        Args:
            template_id: Template to reject.
            admin_id: Admin taking the decision, recorded in the audit row.
            reason: Explanation shown to the creator; stripped before use.
            authorized: Whether the caller holds the moderation permission.

        Returns:
            The rejected template.

        Raises:
            StateTransitionError: If the caller is not authorized, the
                reason is too short or too long, the template does not
                exist, or it is not pending.
        """
        self._check_authorized(template_id, admin_id, PublicationAction.REJECT, authorized)
        stripped = normalize_rejection_reason(reason)

        return await self._apply(
            template_id,
            admin_id,
            PublicationAction.REJECT,
            changes=rejection_changes(stripped),
            details={"reason": stripped},
        )

    def _check_authorized(
        self,
        template_id: uuid.UUID,
        admin_id: uuid.UUID,
        action: PublicationAction,
        authorized: bool,
    ) -> None:
        if not authorized:
            logger.warning(f"User {admin_id} is not allowed to {action.value} template {template_id}")
            raise StateTransitionError(
                "Only admins can moderate templates", reason="unauthorized"
            )

    async def _apply(
        self,
        template_id: uuid.UUID,
        admin_id: uuid.UUID,
        action: PublicationAction,
        *,
        changes: dict[str, Any],
        details: dict[str, Any],
    ) -> Template:
        template = await self._repository.get(template_id)
        if template is None:
            logger.warning(f"Cannot {action.value} missing template {template_id}")
            raise StateTransitionError("Template not found", reason="not_found")

        try:
            target = next_status(template.status, action)
        except StateTransitionError:
            logger.warning(
                f"Refused to {action.value} template {template_id} in status {template.status}"
            )
            raise

        audit = AdminAction(
            admin_id=admin_id,
            action_type=action.audit_type,
            target_type="template",
            target_id=template_id,
            details=details,
        )
        updated = await self._repository.transition_status(
            template_id,
            expected=TemplateStatus.PENDING,
            target=target,
            changes=changes,
            audit=audit,
        )

        if updated is None:
            # Another decision committed between the read and the write
            current = await self._repository.get(template_id)
            if current is None:
                raise StateTransitionError("Template not found", reason="not_found")
            logger.warning(
                f"Concurrent moderation of template {template_id}: status is now {current.status}"
            )
            raise StateTransitionError(
                f"Cannot {action.value} template: status is '{TemplateStatus(current.status).value}', "
                f"expected '{TemplateStatus.PENDING.value}'",
                reason="invalid_state",
            )

        logger.info(f"Template {template_id} {target.value} by admin {admin_id}")
        return updated
