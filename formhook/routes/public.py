"""
Public form routes.

No authentication. Webhook details are never exposed here, and webhook
delivery problems never fail a submission.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from formhook.dependencies.rate_limit import check_submission_rate_limit, get_client_ip
from formhook.dependencies.services import get_form_service, get_submission_service
from formhook.logging_config import get_logger
from formhook.routes.metrics import track_submission_received
from formhook.services.form_service import FormService
from formhook.services.submission_service import SubmissionService
from formhook.services.webhook_service import schedule_webhook_dispatch


router = APIRouter(prefix="/api/public/forms", tags=["public"])


@router.get("/{form_id}", response_model=dict)
async def get_public_form(
    form_id: str,
    forms: FormService = Depends(get_form_service)
):
    """Public view of a form, without webhook details."""
    form = await forms.get_form(form_id)

    if not form:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Form not found"
        )

    return {
        "id": form.id,
        "title": form.title,
        "description": form.description,
        "fields": form.fields,
        "settings": form.settings
    }


@router.post(
    "/{form_id}/submit",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_submission_rate_limit)]
)
async def submit_form(
    form_id: str,
    request: Request,
    data: dict[str, Any] = Body(...),
    forms: FormService = Depends(get_form_service),
    submissions: SubmissionService = Depends(get_submission_service)
):
    """
    Store a submission and forward it to the form's webhook.

    Returns as soon as the submission is stored; the webhook is
    dispatched in the background.
    """
    form = await forms.get_form(form_id)

    if not form:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Form not found"
        )

    if not form.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This form is currently inactive"
        )

    submission = await submissions.create_submission(
        form_id=form.id,
        data=data,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent", "")
    )
    track_submission_received(form.id)
    get_logger(form_id=form.id, submission_id=submission.id).info("submission_received")

    schedule_webhook_dispatch(submission.id)

    return {
        "message": "Form submitted successfully",
        "submission_id": submission.id
    }
