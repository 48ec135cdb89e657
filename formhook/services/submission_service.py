"""
Submission service.

Storage for submissions and their webhook delivery logs. The webhook
dispatcher talks to storage only through update_submission_webhook_status
and create_webhook_log.
"""
from typing import Any
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from formhook.models.submission import Submission, WebhookStatus
from formhook.models.webhook import WebhookLog


class SubmissionService:
    """Service for submissions and webhook logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_submission(
        self,
        form_id: str,
        data: dict[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None
    ) -> Submission:
        """
        Persist a new submission with webhook status PENDING.

        Args:
            form_id: Form the submission belongs to
            data: Submitted field values
            ip_address: Originating client IP
            user_agent: Originating User-Agent header

        Returns:
            Newly created Submission
        """
        submission = Submission(
            form_id=form_id,
            data=data,
            webhook_status=WebhookStatus.PENDING,
            webhook_attempts=0,
            ip_address=ip_address,
            user_agent=user_agent or ""
        )
        self.db.add(submission)
        await self.db.commit()
        await self.db.refresh(submission)
        return submission

    async def get_submission(self, submission_id: str) -> Submission | None:
        """Get submission by ID."""
        stmt = select(Submission).where(Submission.id == submission_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_submissions(self, form_id: str) -> list[Submission]:
        """Get all submissions for a form, newest first."""
        stmt = (
            select(Submission)
            .where(Submission.form_id == form_id)
            .order_by(Submission.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_submission_webhook_status(
        self,
        submission_id: str,
        status: WebhookStatus,
        attempts: int,
        response: str | None = None
    ) -> Submission | None:
        """
        Overwrite the webhook status fields of a submission.

        Safe to call repeatedly for the same submission; the last call wins.

        Args:
            submission_id: Submission UUID
            status: New webhook status
            attempts: Attempt count to record
            response: Human-readable summary; left untouched when None

        Returns:
            Updated Submission, None if not found
        """
        submission = await self.get_submission(submission_id)
        if not submission:
            return None

        submission.webhook_status = status
        submission.webhook_attempts = attempts
        if response is not None:
            submission.webhook_response = response

        await self.db.commit()
        await self.db.refresh(submission)
        return submission

    async def create_webhook_log(
        self,
        submission_id: str,
        request_url: str,
        request_body: Any,
        request_headers: dict[str, str],
        response_status: int,
        response_body: str | None,
        attempt_number: int,
        successful: bool
    ) -> WebhookLog:
        """Append one delivery attempt record. Logs are never updated."""
        entry = WebhookLog(
            submission_id=submission_id,
            request_url=request_url,
            request_body=request_body,
            request_headers=request_headers,
            response_status=response_status,
            response_body=response_body,
            attempt_number=attempt_number,
            successful=successful
        )
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def get_webhook_logs(self, submission_id: str) -> list[WebhookLog]:
        """Get delivery logs for a submission, newest first."""
        stmt = (
            select(WebhookLog)
            .where(WebhookLog.submission_id == submission_id)
            .order_by(WebhookLog.created_at.desc(), WebhookLog.id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_webhook_logs_for_form(self, form_id: str) -> list[tuple[WebhookLog, Submission]]:
        """
        Get delivery logs across all submissions of a form, newest first.

        Returns:
            (log, submission) pairs so callers can show the submission date
        """
        stmt = (
            select(WebhookLog, Submission)
            .join(Submission, WebhookLog.submission_id == Submission.id)
            .where(Submission.form_id == form_id)
            .order_by(WebhookLog.created_at.desc(), WebhookLog.id.desc())
        )
        result = await self.db.execute(stmt)
        return [(log, submission) for log, submission in result.all()]
