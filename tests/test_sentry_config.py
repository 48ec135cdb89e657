"""Tests for Sentry error reporting helpers."""
from unittest.mock import MagicMock

from formhook import sentry_config


def test_capture_exception_tags_scope(monkeypatch):
    sdk = MagicMock()
    sdk.get_client.return_value.is_active.return_value = True
    monkeypatch.setattr(sentry_config, "sentry_sdk", sdk)
    error = RuntimeError("boom")

    sentry_config.capture_exception(error, submission_id="sub-1", form_id="form-1")

    scope = sdk.new_scope.return_value.__enter__.return_value
    scope.set_tag.assert_any_call("submission_id", "sub-1")
    scope.set_tag.assert_any_call("form_id", "form-1")
    sdk.capture_exception.assert_called_once_with(error)


def test_capture_exception_noop_when_disabled(monkeypatch):
    sdk = MagicMock()
    sdk.get_client.return_value.is_active.return_value = False
    monkeypatch.setattr(sentry_config, "sentry_sdk", sdk)

    sentry_config.capture_exception(RuntimeError("boom"))

    sdk.new_scope.assert_not_called()
    sdk.capture_exception.assert_not_called()


def test_add_context_tags_service():
    event = sentry_config.add_context({"tags": {"env": "test"}}, None)
    assert event["tags"] == {"env": "test", "service": "FormHook"}
