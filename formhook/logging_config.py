"""
Structured logging for FormHook.

Every line is a JSON object carrying the service name and environment, plus
whatever context a caller binds (submission_id, form_id, url...).
"""
import logging
import sys

import structlog

from formhook.config import settings


def _add_service_context(logger, method_name, event_dict):
    event_dict.setdefault("service", settings.APP_NAME.lower())
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    return event_dict


def configure_logging(level: str | None = None):
    """Set up structlog JSON output at LOG_LEVEL (INFO by default)."""
    level_no = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    if not isinstance(level_no, int):
        level_no = logging.INFO

    # httpx and uvicorn log through the standard library
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_no)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service_context,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


logger = configure_logging()


def get_logger(**context):
    """
    Logger with context bound to every line it writes.

    Usage:
        log = get_logger(submission_id=submission.id, form_id=form.id)
        log.info("webhook_attempt_failed", attempt=2, status_code=503)
    """
    return logger.bind(**context)
