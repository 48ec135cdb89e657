"""
Form API routes.

Owner-scoped form management for the form builder.
"""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import AnyHttpUrl, BaseModel, Field

from formhook.dependencies.auth import get_current_user, TokenPayload
from formhook.dependencies.services import get_form_service
from formhook.models.form import Form
from formhook.services.form_service import FormService
from formhook.services.webhook_config import WebhookConfig


router = APIRouter(prefix="/api/forms", tags=["forms"])


class CreateFormRequest(BaseModel):
    """Request model for creating a form."""
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    fields: list[dict[str, Any]] = []
    settings: dict[str, Any] = {}
    webhook_url: AnyHttpUrl | None = None
    webhook_config: WebhookConfig | None = None


class UpdateFormRequest(BaseModel):
    """Request model for partially updating a form."""
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    fields: list[dict[str, Any]] | None = None
    settings: dict[str, Any] | None = None


class FormResponse(BaseModel):
    """Response model for a form (owner view)."""
    id: str
    title: str
    description: str | None = None
    fields: list[Any]
    settings: dict[str, Any]
    webhook_url: str | None = None
    webhook_config: Any = None
    created_at: str | None = None
    updated_at: str | None = None


def form_to_response(form: Form) -> FormResponse:
    """Convert Form model to FormResponse."""
    return FormResponse(
        id=form.id,
        title=form.title,
        description=form.description,
        fields=form.fields or [],
        settings=form.settings or {},
        webhook_url=form.webhook_url,
        webhook_config=form.webhook_config,
        created_at=form.created_at.isoformat() if form.created_at else None,
        updated_at=form.updated_at.isoformat() if form.updated_at else None,
    )


def dump_webhook_config(config: WebhookConfig | None) -> dict[str, Any] | None:
    """Serialize a validated webhook config with the editor's key names."""
    if config is None:
        return None
    return config.model_dump(by_alias=True, exclude_none=True, mode="json")


async def get_owned_form(form_id: str, token: TokenPayload, forms: FormService) -> Form:
    """
    Load a form and check the caller owns it.

    Raises 404 if the form does not exist, 403 if it belongs to someone else.
    """
    form = await forms.get_form(form_id)

    if not form:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Form not found"
        )

    if form.user_id != token.sub:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized access to this form"
        )

    return form


@router.post("", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
async def create_form(
    request: CreateFormRequest,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service)
):
    """Create a form owned by the caller."""
    form = await forms.create_form(
        user_id=token.sub,
        title=request.title,
        description=request.description,
        fields=request.fields,
        settings=request.settings,
        webhook_url=str(request.webhook_url) if request.webhook_url else None,
        webhook_config=dump_webhook_config(request.webhook_config)
    )
    return form_to_response(form)


@router.get("", response_model=list[FormResponse])
async def list_forms(
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service)
):
    """List the caller's forms, newest first."""
    return [form_to_response(form) for form in await forms.get_forms(token.sub)]


@router.get("/{form_id}", response_model=FormResponse)
async def get_form(
    form_id: str,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service)
):
    """Get one of the caller's forms."""
    return form_to_response(await get_owned_form(form_id, token, forms))


@router.patch("/{form_id}", response_model=FormResponse)
async def update_form(
    form_id: str,
    request: UpdateFormRequest,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service)
):
    """Update title, description, fields or settings of a form."""
    form = await get_owned_form(form_id, token, forms)
    changes = request.model_dump(exclude_unset=True)
    form = await forms.update_form(form, **changes)
    return form_to_response(form)
