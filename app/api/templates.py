"""Template management API routes.

Handles template creation and updates, form generation, rendering with
submitted data, previews, and structure checks.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import (
    get_access_policy,
    get_app_settings,
    get_template_repository,
    require_permission,
)
from app.api.schemas import (
    ProcessRequest,
    StructureValidationResponse,
    TemplateCreate,
    TemplateUpdate,
)
from app.core.config import Settings
from app.core.permissions import AccessPolicy, Permission
from app.db.models import Template, TemplateRead, TemplateStatus, User
from app.interfaces.repository import BaseTemplateRepository
from app.interfaces.template import DataValidationError, TemplateStructureError
from app.strategies.template_engine import (
    FormConfig,
    PreviewResult,
    ProcessedTemplate,
    generate_form_config,
    generate_preview,
    parse_placeholders,
    process_template,
    validate_template_structure,
)
from app.strategies.template_engine.structure import dump_placeholders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])

# Errors rendered by the application's exception handlers
_PASSTHROUGH = (HTTPException, TemplateStructureError, DataValidationError)


# =============================================================================
# Helper Functions
# =============================================================================


def _can_manage(template: Template, user: User, policy: AccessPolicy) -> bool:
    """Owners and template managers may see and edit unpublished templates."""
    return template.created_by == user.id or policy.allows(user.role, Permission.MANAGE_TEMPLATES)


async def _get_visible_template(
    template_id: uuid.UUID,
    user: User,
    repository: BaseTemplateRepository,
    policy: AccessPolicy,
) -> Template:
    """Load a template the caller may see; unpublished ones look missing to others."""
    template = await repository.get(template_id)
    if template is None or (
        template.status != TemplateStatus.PUBLISHED and not _can_manage(template, user, policy)
    ):
        logger.warning(f"Template not found or not visible: {template_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
    return template


def _validated_placeholders(body: str, placeholders: dict) -> dict:
    """Validate a body/schema pair and return the normalized schema.

    Raises:
        TemplateStructureError: If the pair is inconsistent or malformed.
    """
    result = validate_template_structure(body, placeholders)
    if not result.is_valid:
        raise TemplateStructureError(result.errors)
    return dump_placeholders(parse_placeholders(placeholders))


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=TemplateRead, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: TemplateCreate,
    current_user: User = Depends(require_permission(Permission.CREATE_TEMPLATE)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
    settings: Settings = Depends(get_app_settings),
) -> TemplateRead:
    """Create a template awaiting moderation.

    Args:
        payload: Template content and placeholder schema.
        current_user: The creator.
        repository: Template repository.
        settings: Application settings.

    Returns:
        The stored template with status ``pending``.

    Raises:
        TemplateStructureError: If body and placeholders disagree.
    """
    try:
        logger.info(f"Creating template '{payload.title}' for user {current_user.id}")

        placeholders = _validated_placeholders(payload.body, payload.placeholders)

        template = Template(
            title=payload.title,
            description=payload.description,
            body=payload.body,
            placeholders=placeholders,
            price=payload.price,
            currency=payload.currency or settings.default_currency,
            created_by=current_user.id,
            status=TemplateStatus.PENDING,
        )
        template = await repository.add(template)

        logger.info(f"Created template {template.id} ({len(placeholders)} placeholders)")
        return TemplateRead.model_validate(template)

    except _PASSTHROUGH:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in create_template: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e


@router.get("/{template_id}", response_model=TemplateRead)
async def get_template(
    template_id: uuid.UUID,
    current_user: User = Depends(require_permission(Permission.READ_TEMPLATE)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
    policy: AccessPolicy = Depends(get_access_policy),
) -> TemplateRead:
    """Get a template by ID."""
    template = await _get_visible_template(template_id, current_user, repository, policy)
    return TemplateRead.model_validate(template)


@router.put("/{template_id}", response_model=TemplateRead)
async def update_template(
    template_id: uuid.UUID,
    payload: TemplateUpdate,
    current_user: User = Depends(require_permission(Permission.UPDATE_OWN_TEMPLATE)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
) -> TemplateRead:
    """Update a template's content.

    The merged body and placeholder schema are validated again. The
    publication status is never changed by an update.

    Args:
        template_id: Template to update.
        payload: Fields to change.
        current_user: Must be the template's creator.
        repository: Template repository.

    Returns:
        The updated template.

    Raises:
        HTTPException: If the template is missing or owned by someone else.
        TemplateStructureError: If the merged body and placeholders disagree.
    """
    try:
        template = await repository.get(template_id)
        if template is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Template not found",
            )
        if template.created_by != current_user.id:
            logger.warning(f"User {current_user.id} tried to update template {template_id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only update your own templates",
            )

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "body" in changes or "placeholders" in changes:
            body = changes.get("body", template.body)
            placeholders = changes.get("placeholders", template.placeholders)
            changes["placeholders"] = _validated_placeholders(body, placeholders)

        updated = await repository.update_content(template_id, changes)
        if updated is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Template not found",
            )

        logger.info(f"Updated template {template_id}: {', '.join(changes) or 'no changes'}")
        return TemplateRead.model_validate(updated)

    except _PASSTHROUGH:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in update_template: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e


@router.get("/{template_id}/form", response_model=FormConfig)
async def get_form_config(
    template_id: uuid.UUID,
    current_user: User = Depends(require_permission(Permission.READ_TEMPLATE)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
    policy: AccessPolicy = Depends(get_access_policy),
) -> FormConfig:
    """Get the fill-in form description of a template."""
    template = await _get_visible_template(template_id, current_user, repository, policy)
    return generate_form_config(template)


@router.post("/{template_id}/process", response_model=ProcessedTemplate)
async def process_template_data(
    template_id: uuid.UUID,
    request: ProcessRequest,
    current_user: User = Depends(require_permission(Permission.CREATE_DOCUMENT)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
    policy: AccessPolicy = Depends(get_access_policy),
    settings: Settings = Depends(get_app_settings),
) -> ProcessedTemplate:
    """Render a template with submitted values.

    Raises:
        DataValidationError: If the submitted values are invalid.
        TemplateStructureError: If the stored schema is malformed, or if
            strict resolution is enabled and tokens remain.
    """
    try:
        template = await _get_visible_template(template_id, current_user, repository, policy)

        processed = process_template(
            template,
            request.user_data,
            strict=settings.strict_placeholder_resolution,
        )
        logger.info(
            f"Processed template {template_id} for user {current_user.id}: "
            f"{processed.injection_metadata.placeholders_processed} fields"
        )
        return processed

    except _PASSTHROUGH:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in process_template_data: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e


@router.post("/{template_id}/preview", response_model=PreviewResult)
async def preview_template(
    template_id: uuid.UUID,
    request: ProcessRequest,
    current_user: User = Depends(require_permission(Permission.READ_TEMPLATE)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
    policy: AccessPolicy = Depends(get_access_policy),
) -> PreviewResult:
    """Render a preview; invalid data is reported in the result, not raised."""
    template = await _get_visible_template(template_id, current_user, repository, policy)
    return generate_preview(template, request.user_data)


@router.get("/{template_id}/validate", response_model=StructureValidationResponse)
async def validate_template(
    template_id: uuid.UUID,
    current_user: User = Depends(require_permission(Permission.READ_TEMPLATE)),
    repository: BaseTemplateRepository = Depends(get_template_repository),
    policy: AccessPolicy = Depends(get_access_policy),
) -> StructureValidationResponse:
    """Re-run structure validation on a stored template."""
    template = await repository.get(template_id)
    if template is None or not _can_manage(template, current_user, policy):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )

    result = validate_template_structure(template.body, template.placeholders)
    return StructureValidationResponse(
        template_id=template.id,
        is_valid=result.is_valid,
        errors=list(result.errors),
    )
