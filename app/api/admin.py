"""Admin moderation API routes.

Lists templates awaiting review, runs the quality review, and applies
approve/reject decisions through the publisher.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import (
    get_access_policy,
    get_current_user,
    get_publisher,
    get_template_repository,
    require_permission,
)
from app.api.schemas import ApproveRequest, RejectRequest, TemplateListResponse
from app.core.permissions import AccessPolicy, Permission
from app.db.models import TemplateRead, TemplateStatus, User
from app.interfaces.repository import BaseTemplateRepository
from app.strategies.moderation import QualityReport, TemplatePublisher, review_template_quality

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/templates", tags=["admin"])


@router.get("/pending", response_model=TemplateListResponse)
async def list_pending_templates(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    current_user: User = Depends(require_permission(Permission.MANAGE_TEMPLATES)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
) -> TemplateListResponse:
    """List templates awaiting moderation, oldest first."""
    logger.info(f"Listing pending templates: page={page}, page_size={page_size}")

    result = await repository.list_by_status(TemplateStatus.PENDING, page, page_size)
    return TemplateListResponse(
        templates=[TemplateRead.model_validate(t) for t in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/{template_id}/review", response_model=QualityReport)
async def review_template(
    template_id: uuid.UUID,
    current_user: User = Depends(require_permission(Permission.MODERATE_CONTENT)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
) -> QualityReport:
    """Run the quality review of a template."""
    template = await repository.get(template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )

    report = review_template_quality(template)
    logger.info(
        f"Reviewed template {template_id}: {len(report.issues)} issues, "
        f"{len(report.warnings)} warnings"
    )
    return report


@router.put("/{template_id}/approve", response_model=TemplateRead)
async def approve_template(
    template_id: uuid.UUID,
    request: ApproveRequest,
    current_user: User = Depends(get_current_user),
    policy: AccessPolicy = Depends(get_access_policy),
    publisher: TemplatePublisher = Depends(get_publisher),
) -> TemplateRead:
    """Publish a pending template.

    Raises:
        StateTransitionError: Rendered as 403, 404 or 409 by the
            application's exception handler.
    """
    template = await publisher.approve_template(
        template_id,
        current_user.id,
        is_verified=request.is_verified,
        is_featured=request.is_featured,
        authorized=policy.allows(current_user.role, Permission.MODERATE_CONTENT),
    )
    return TemplateRead.model_validate(template)


@router.put("/{template_id}/reject", response_model=TemplateRead)
async def reject_template(
    template_id: uuid.UUID,
    request: RejectRequest,
    current_user: User = Depends(get_current_user),
    policy: AccessPolicy = Depends(get_access_policy),
    publisher: TemplatePublisher = Depends(get_publisher),
) -> TemplateRead:
    """Reject a pending template with a reason shown to its creator.

    Raises:
        StateTransitionError: Rendered as 403, 404, 409 or 422 by the
            application's exception handler.
    """
    template = await publisher.reject_template(
        template_id,
        current_user.id,
        request.reason,
        authorized=policy.allows(current_user.role, Permission.MODERATE_CONTENT),
    )
    return TemplateRead.model_validate(template)
