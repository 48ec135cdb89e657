"""
Service dependencies for FastAPI routes.

Routes receive services through these so tests can swap in fakes with
app.dependency_overrides.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from formhook.database import get_db
from formhook.services.form_service import FormService
from formhook.services.submission_service import SubmissionService
from formhook.services.webhook_service import WebhookDispatcher


def get_form_service(db: AsyncSession = Depends(get_db)) -> FormService:
    return FormService(db)


def get_submission_service(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


def get_webhook_dispatcher(
    submissions: SubmissionService = Depends(get_submission_service)
) -> WebhookDispatcher:
    return WebhookDispatcher(submissions)
