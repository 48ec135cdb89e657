"""
Sentry configuration for error tracking.

Captures unhandled exceptions and webhook dispatch faults.
"""
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from formhook.config import settings
from formhook.logging_config import get_logger

log = get_logger(component="sentry")


def configure_sentry():
    """
    Initialize Sentry with FastAPI and SQLAlchemy integrations.

    Requires SENTRY_DSN environment variable to be set.
    """
    dsn = settings.SENTRY_DSN

    if not dsn:
        log.warning("sentry_disabled", reason="SENTRY_DSN not set")
        return

    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
        before_send=add_context,
        # Sample rate: capture 10% of transactions for performance monitoring
        traces_sample_rate=0.1,
        environment=settings.ENVIRONMENT,
        release=settings.APP_VERSION,
    )

    log.info("sentry_initialized", environment=settings.ENVIRONMENT)


def add_context(event, hint):
    """Tag error events with the service name."""
    event.setdefault("tags", {})["service"] = settings.APP_NAME
    return event


def capture_exception(exc_info=None, **tags):
    """
    Capture an exception to Sentry, tagged with the given ids.

    Usage:
        try:
            # some code
        except Exception as e:
            capture_exception(e, submission_id=submission.id)
    """
    if not sentry_sdk.get_client().is_active():
        return

    with sentry_sdk.new_scope() as scope:
        for key, value in tags.items():
            scope.set_tag(key, value)
        sentry_sdk.capture_exception(exc_info)
