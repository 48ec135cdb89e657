"""
Webhook API routes.

Provides endpoints for configuring the webhook target of a form.
"""
from fastapi import APIRouter, Depends
from pydantic import AnyHttpUrl, BaseModel

from formhook.dependencies.auth import get_current_user, TokenPayload
from formhook.dependencies.services import get_form_service
from formhook.routes.forms import dump_webhook_config, get_owned_form
from formhook.services.form_service import FormService
from formhook.services.webhook_config import WebhookConfig


router = APIRouter(prefix="/api/forms/{form_id}/webhook", tags=["webhooks"])


class SetWebhookRequest(BaseModel):
    """Request model for setting a form's webhook."""
    url: AnyHttpUrl
    config: WebhookConfig = WebhookConfig()


@router.put("", response_model=dict)
async def set_webhook(
    form_id: str,
    request: SetWebhookRequest,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service)
):
    """
    Set the webhook URL and auth/retry config for a form.

    Every new submission to the form is POSTed to this URL.
    """
    form = await get_owned_form(form_id, token, forms)
    await forms.set_webhook(form, str(request.url), dump_webhook_config(request.config))

    return {
        "message": "Webhook configured successfully",
        "url": str(request.url)
    }


@router.get("", response_model=dict)
async def get_webhook(
    form_id: str,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service)
):
    """Get the current webhook configuration of a form."""
    form = await get_owned_form(form_id, token, forms)

    return {
        "url": form.webhook_url,
        "configured": form.webhook_url is not None,
        "config": form.webhook_config
    }


@router.delete("", response_model=dict)
async def delete_webhook(
    form_id: str,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service)
):
    """Remove webhook delivery from a form."""
    form = await get_owned_form(form_id, token, forms)
    await forms.clear_webhook(form)

    return {"message": "Webhook removed successfully"}
