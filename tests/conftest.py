"""Pytest configuration and shared fixtures."""
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from formhook.models.form import Form
from formhook.models.submission import Submission, WebhookStatus
from formhook.models.webhook import WebhookLog


class FakeStorage:
    """
    In-memory stand-in for FormService and SubmissionService.

    Keeps every status write in status_history so tests can check the
    full sequence of transitions, not just the final state.
    """

    def __init__(self):
        self.forms: dict[str, Form] = {}
        self.submissions: dict[str, Submission] = {}
        self.logs: list[WebhookLog] = []
        self.status_history: list[tuple[str, WebhookStatus, int, str | None]] = []
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self._counter = 0

    def _now(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    # Forms

    async def create_form(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        fields: list[Any] | None = None,
        settings: dict[str, Any] | None = None,
        webhook_url: str | None = None,
        webhook_config: Any = None
    ) -> Form:
        now = self._now()
        form = Form(
            id=self._next_id("form"),
            user_id=user_id,
            title=title,
            description=description,
            fields=fields or [],
            settings=settings or {},
            webhook_url=webhook_url,
            webhook_config=webhook_config,
            created_at=now,
            updated_at=now,
        )
        self.forms[form.id] = form
        return form

    async def get_form(self, form_id: str) -> Form | None:
        return self.forms.get(form_id)

    async def get_forms(self, user_id: str) -> list[Form]:
        owned = [f for f in self.forms.values() if f.user_id == user_id]
        return list(reversed(owned))

    async def update_form(self, form: Form, **changes: Any) -> Form:
        for key, value in changes.items():
            setattr(form, key, value)
        form.updated_at = self._now()
        return form

    async def set_webhook(self, form: Form, url: str, config: Any = None) -> Form:
        return await self.update_form(form, webhook_url=url, webhook_config=config)

    async def clear_webhook(self, form: Form) -> Form:
        return await self.update_form(form, webhook_url=None, webhook_config=None)

    # Submissions

    async def create_submission(
        self,
        form_id: str,
        data: dict[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None
    ) -> Submission:
        submission = Submission(
            id=self._next_id("sub"),
            form_id=form_id,
            data=data,
            webhook_status=WebhookStatus.PENDING,
            webhook_attempts=0,
            webhook_response=None,
            ip_address=ip_address,
            user_agent=user_agent or "",
            created_at=self._now(),
        )
        self.submissions[submission.id] = submission
        return submission

    async def get_submission(self, submission_id: str) -> Submission | None:
        return self.submissions.get(submission_id)

    async def get_submissions(self, form_id: str) -> list[Submission]:
        return list(reversed([s for s in self.submissions.values() if s.form_id == form_id]))

    async def update_submission_webhook_status(
        self,
        submission_id: str,
        status: WebhookStatus,
        attempts: int,
        response: str | None = None
    ) -> Submission | None:
        self.status_history.append((submission_id, status, attempts, response))
        submission = self.submissions.get(submission_id)
        if submission is None:
            return None
        submission.webhook_status = status
        submission.webhook_attempts = attempts
        if response is not None:
            submission.webhook_response = response
        return submission

    async def create_webhook_log(self, **fields: Any) -> WebhookLog:
        entry = WebhookLog(id=len(self.logs) + 1, created_at=self._now(), **fields)
        self.logs.append(entry)
        return entry

    async def get_webhook_logs(self, submission_id: str) -> list[WebhookLog]:
        return list(reversed([log for log in self.logs if log.submission_id == submission_id]))

    async def get_webhook_logs_for_form(self, form_id: str) -> list[tuple[WebhookLog, Submission]]:
        rows = []
        for log in reversed(self.logs):
            submission = self.submissions.get(log.submission_id)
            if submission is not None and submission.form_id == form_id:
                rows.append((log, submission))
        return rows

    def logs_for(self, submission_id: str) -> list[WebhookLog]:
        """Logs for a submission in insertion order."""
        return [log for log in self.logs if log.submission_id == submission_id]

    def statuses_for(self, submission_id: str) -> list[tuple[WebhookStatus, int, str | None]]:
        return [entry[1:] for entry in self.status_history if entry[0] == submission_id]


class WebhookEndpoint:
    """
    Scripted webhook receiver for httpx.MockTransport.

    Each entry in script is an HTTP status code or an exception to raise;
    the last entry repeats once the script runs out.
    """

    def __init__(self, *script: int | Exception):
        self.script = list(script) or [200]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.script[min(len(self.requests), len(self.script)) - 1]
        if isinstance(step, Exception):
            raise step
        return httpx.Response(step, json={"received": len(self.requests)})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()
