"""
Submission API routes.

Submission listing, webhook delivery logs and manual webhook retry.
"""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from formhook.dependencies.auth import get_current_user, TokenPayload
from formhook.dependencies.services import (
    get_form_service,
    get_submission_service,
    get_webhook_dispatcher,
)
from formhook.models.submission import Submission, WebhookStatus
from formhook.models.webhook import WebhookLog
from formhook.routes.forms import get_owned_form
from formhook.services.form_service import FormService
from formhook.services.submission_service import SubmissionService
from formhook.services.webhook_service import WebhookDispatcher


router = APIRouter(prefix="/api", tags=["submissions"])


class SubmissionResponse(BaseModel):
    """Response model for a submission."""
    id: str
    form_id: str
    data: dict[str, Any]
    webhook_status: str
    webhook_attempts: int = 0
    webhook_response: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: str | None = None


class WebhookLogResponse(BaseModel):
    """Response model for a webhook delivery log."""
    id: int
    submission_id: str
    request_url: str
    request_body: Any = None
    request_headers: dict[str, str] | None = None
    response_status: int
    response_body: str | None = None
    attempt_number: int
    successful: bool
    created_at: str | None = None
    submission_date: str | None = None


def submission_to_response(submission: Submission) -> SubmissionResponse:
    """Convert Submission model to SubmissionResponse."""
    status_value = submission.webhook_status
    return SubmissionResponse(
        id=submission.id,
        form_id=submission.form_id,
        data=submission.data,
        webhook_status=status_value.value if isinstance(status_value, WebhookStatus) else status_value,
        webhook_attempts=submission.webhook_attempts or 0,
        webhook_response=submission.webhook_response,
        ip_address=submission.ip_address,
        user_agent=submission.user_agent,
        created_at=submission.created_at.isoformat() if submission.created_at else None,
    )


def log_to_response(log: WebhookLog, submission: Submission | None = None) -> WebhookLogResponse:
    """Convert WebhookLog model to WebhookLogResponse."""
    return WebhookLogResponse(
        id=log.id,
        submission_id=log.submission_id,
        request_url=log.request_url,
        request_body=log.request_body,
        request_headers=log.request_headers,
        response_status=log.response_status,
        response_body=log.response_body,
        attempt_number=log.attempt_number,
        successful=log.successful,
        created_at=log.created_at.isoformat() if log.created_at else None,
        submission_date=(
            submission.created_at.isoformat()
            if submission is not None and submission.created_at else None
        ),
    )


async def get_owned_submission(
    submission_id: str,
    token: TokenPayload,
    forms: FormService,
    submissions: SubmissionService
):
    """
    Load a submission and its form, checking the caller owns the form.

    Returns:
        (submission, form)
    """
    submission = await submissions.get_submission(submission_id)

    if not submission:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Submission not found"
        )

    form = await forms.get_form(submission.form_id)

    if not form or form.user_id != token.sub:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized access to this submission"
        )

    return submission, form


@router.get("/forms/{form_id}/submissions", response_model=list[SubmissionResponse])
async def list_submissions(
    form_id: str,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service),
    submissions: SubmissionService = Depends(get_submission_service)
):
    """List a form's submissions, newest first."""
    form = await get_owned_form(form_id, token, forms)
    return [submission_to_response(s) for s in await submissions.get_submissions(form.id)]


@router.get("/forms/{form_id}/webhook-logs", response_model=list[WebhookLogResponse])
async def list_form_webhook_logs(
    form_id: str,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service),
    submissions: SubmissionService = Depends(get_submission_service)
):
    """All webhook delivery logs for a form, newest first."""
    form = await get_owned_form(form_id, token, forms)
    rows = await submissions.get_webhook_logs_for_form(form.id)
    return [log_to_response(log, submission) for log, submission in rows]


@router.get("/submissions/{submission_id}", response_model=dict)
async def get_submission(
    submission_id: str,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service),
    submissions: SubmissionService = Depends(get_submission_service)
):
    """Get a submission with its webhook delivery logs."""
    submission, _ = await get_owned_submission(submission_id, token, forms, submissions)
    logs = await submissions.get_webhook_logs(submission.id)

    return {
        "submission": submission_to_response(submission).model_dump(),
        "webhook_logs": [log_to_response(log).model_dump() for log in logs]
    }


@router.post("/submissions/{submission_id}/retry-webhook", response_model=dict)
async def retry_webhook(
    submission_id: str,
    token: TokenPayload = Depends(get_current_user),
    forms: FormService = Depends(get_form_service),
    submissions: SubmissionService = Depends(get_submission_service),
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher)
):
    """
    Re-send a submission to its form's webhook.

    Resets the status to pending (keeping the attempt count) and waits for
    the dispatch to finish. Earlier delivery logs are kept.
    """
    submission, form = await get_owned_submission(submission_id, token, forms, submissions)

    await submissions.update_submission_webhook_status(
        submission.id,
        WebhookStatus.PENDING,
        submission.webhook_attempts or 0,
        "Manual retry initiated"
    )

    success = await dispatcher.dispatch(submission, form)

    return {
        "success": success,
        "message": "Webhook dispatched successfully" if success else "Webhook dispatch failed"
    }
