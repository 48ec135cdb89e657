"""
Webhook Service

Delivers form submissions to the form's webhook with retry logic.

Each dispatch runs as its own asyncio task: the backoff between attempts is
an asyncio.sleep, so a submission waiting to retry never holds up another
submission's delivery.
"""
import asyncio
from typing import Any, Awaitable, Callable

import httpx
from pydantic import BaseModel

from formhook.config import settings
from formhook.database import AsyncSessionLocal
from formhook.logging_config import get_logger
from formhook.models.form import Form
from formhook.models.submission import Submission, WebhookStatus
from formhook.routes.metrics import track_webhook_attempt, track_webhook_dispatch
from formhook.sentry_config import capture_exception
from formhook.services.form_service import FormService
from formhook.services.submission_service import SubmissionService
from formhook.services.webhook_config import build_webhook_headers, resolve_webhook_config


class AttemptOutcome(BaseModel):
    """Result of a single delivery attempt."""
    status_code: int  # 0 when no response was received
    response_body: str | None = None
    success: bool
    error: str | None = None


def compute_backoff_delay(
    attempt_number: int,
    base_ms: int | None = None,
    max_ms: int | None = None
) -> float:
    """
    Delay in seconds to wait after a failed attempt.

    Doubles per attempt from the base (1s, 2s, 4s, ...) and is capped at
    the ceiling (30s by default).
    """
    base_ms = settings.WEBHOOK_BACKOFF_BASE_MS if base_ms is None else base_ms
    max_ms = settings.WEBHOOK_BACKOFF_MAX_MS if max_ms is None else max_ms
    return min(base_ms * 2 ** (attempt_number - 1), max_ms) / 1000


def _truncate(text: str | None, limit: int) -> str | None:
    if text is None or len(text) <= limit:
        return text
    return text[:limit] + "...[truncated]"


class WebhookDispatcher:
    """
    Delivers one submission at a time to its form's webhook.

    Example:
        dispatcher = WebhookDispatcher(SubmissionService(db))
        delivered = await dispatcher.dispatch(submission, form)
    """

    def __init__(
        self,
        storage: SubmissionService,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        timeout: float | None = None
    ):
        """
        Args:
            storage: Submission storage used for status updates and logs
            transport: Optional httpx transport (tests use httpx.MockTransport)
            sleep: Coroutine used for the backoff wait
            timeout: HTTP timeout in seconds, defaults to WEBHOOK_TIMEOUT_SECONDS
        """
        self.storage = storage
        self._transport = transport
        self._sleep = sleep
        self._timeout = settings.WEBHOOK_TIMEOUT_SECONDS if timeout is None else timeout

    async def dispatch(self, submission: Submission, form: Form) -> bool:
        """
        Deliver a submission to its form's webhook.

        Never raises. Returns True when the webhook accepted the payload or
        when no webhook is configured, False when retries were exhausted or
        an internal error occurred.
        """
        log = get_logger(submission_id=submission.id, form_id=form.id)

        try:
            if not form.webhook_url:
                await self.storage.update_submission_webhook_status(
                    submission.id,
                    WebhookStatus.SKIPPED,
                    0,
                    "No webhook URL configured"
                )
                track_webhook_dispatch(WebhookStatus.SKIPPED.value)
                log.info("webhook_skipped")
                return True

            config = resolve_webhook_config(form.webhook_config)
            headers = build_webhook_headers(config)

            return await self.deliver_with_retries(
                submission,
                form.webhook_url,
                headers,
                config.retry_limit
            )
        except Exception as e:
            log.exception("webhook_dispatch_error", error=str(e))
            capture_exception(e, submission_id=submission.id, form_id=form.id)
            track_webhook_dispatch(WebhookStatus.ERROR.value)
            try:
                await self.storage.update_submission_webhook_status(
                    submission.id,
                    WebhookStatus.ERROR,
                    0,
                    f"Internal error: {e}"
                )
            except Exception as status_error:
                log.exception("webhook_error_status_not_saved", error=str(status_error))
            return False

    async def deliver_with_retries(
        self,
        submission: Submission,
        url: str,
        headers: dict[str, str],
        max_retries: int
    ) -> bool:
        """
        Run attempts until one succeeds or retries are exhausted.

        The submission's webhook status is updated after every attempt:
        RETRYING while attempts remain, then SENT or FAILED.
        """
        log = get_logger(submission_id=submission.id, url=url)
        total_attempts = max(max_retries, 0) + 1

        for attempt_number in range(1, total_attempts + 1):
            outcome = await self.attempt_delivery(
                submission.id,
                url,
                submission.data,
                headers,
                attempt_number
            )

            if outcome.success:
                await self.storage.update_submission_webhook_status(
                    submission.id,
                    WebhookStatus.SENT,
                    attempt_number,
                    f"Successfully sent after {attempt_number} attempt(s)"
                )
                track_webhook_dispatch(WebhookStatus.SENT.value)
                log.info("webhook_delivered", attempts=attempt_number, status_code=outcome.status_code)
                return True

            if attempt_number < total_attempts:
                await self.storage.update_submission_webhook_status(
                    submission.id,
                    WebhookStatus.RETRYING,
                    attempt_number,
                    f"Retry {attempt_number}/{total_attempts}: {outcome.error}"
                )
                delay = compute_backoff_delay(attempt_number)
                log.info(
                    "webhook_retry_scheduled",
                    attempt=attempt_number,
                    delay_seconds=delay,
                    error=outcome.error
                )
                await self._sleep(delay)
            else:
                await self.storage.update_submission_webhook_status(
                    submission.id,
                    WebhookStatus.FAILED,
                    attempt_number,
                    f"Failed after {attempt_number} attempts: {outcome.error}"
                )
                track_webhook_dispatch(WebhookStatus.FAILED.value)
                log.warning("webhook_failed", attempts=attempt_number, error=outcome.error)

        return False

    async def attempt_delivery(
        self,
        submission_id: str,
        url: str,
        payload: Any,
        headers: dict[str, str],
        attempt_number: int
    ) -> AttemptOutcome:
        """
        POST the payload once and record the attempt.

        Exactly one WebhookLog row is written per call, whatever the outcome.
        """
        limit = settings.WEBHOOK_RESPONSE_BODY_LIMIT

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True
            ) as client:
                response = await client.post(url, json=payload, headers=headers)

            outcome = AttemptOutcome(
                status_code=response.status_code,
                response_body=_truncate(response.text, limit),
                success=response.is_success,
                error=None if response.is_success else f"HTTP {response.status_code}"
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # ValueError covers header values httpx cannot encode
            message = str(e) or type(e).__name__
            outcome = AttemptOutcome(
                status_code=0,
                response_body=_truncate(message, limit),
                success=False,
                error=message
            )

        await self.storage.create_webhook_log(
            submission_id=submission_id,
            request_url=url,
            request_body=payload,
            request_headers=headers,
            response_status=outcome.status_code,
            response_body=outcome.response_body,
            attempt_number=attempt_number,
            successful=outcome.success
        )
        track_webhook_attempt("success" if outcome.success else "failure")

        if not outcome.success:
            get_logger(submission_id=submission_id, url=url).warning(
                "webhook_attempt_failed",
                attempt=attempt_number,
                status_code=outcome.status_code,
                error=outcome.error
            )

        return outcome


async def dispatch_webhook(submission_id: str) -> bool:
    """
    Load a submission and its form in a fresh session and dispatch it.

    Used for background dispatch, where the request's session is gone.
    """
    log = get_logger(submission_id=submission_id)

    async with AsyncSessionLocal() as db:
        submissions = SubmissionService(db)
        submission = await submissions.get_submission(submission_id)
        if not submission:
            log.warning("webhook_dispatch_submission_missing")
            return False

        form = await FormService(db).get_form(submission.form_id)
        if not form:
            log.warning("webhook_dispatch_form_missing", form_id=submission.form_id)
            return False

        return await WebhookDispatcher(submissions).dispatch(submission, form)


# Strong references to in-flight dispatch tasks until they finish
_background_tasks: set[asyncio.Task] = set()


async def _run_background_dispatch(submission_id: str) -> None:
    try:
        await dispatch_webhook(submission_id)
    except Exception as e:
        get_logger(submission_id=submission_id).exception("webhook_background_dispatch_error", error=str(e))
        capture_exception(e, submission_id=submission_id)


def schedule_webhook_dispatch(submission_id: str) -> asyncio.Task:
    """
    Start a fire-and-forget dispatch for a submission.

    Errors are logged and reported, never raised to the caller.
    """
    task = asyncio.create_task(_run_background_dispatch(submission_id))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task
