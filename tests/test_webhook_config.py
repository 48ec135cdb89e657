"""Tests for webhook config resolution and header building."""
import base64
import json

import pytest
from pydantic import ValidationError

from formhook.exceptions import WebhookConfigError
from formhook.services.webhook_config import (
    AUTH_HEADER_BUILDERS,
    AuthType,
    WebhookConfig,
    build_webhook_headers,
    resolve_webhook_config,
)


class TestResolveWebhookConfig:
    """Tests for resolve_webhook_config."""

    @pytest.mark.parametrize("raw", [None, "", "null"])
    def test_missing_config_defaults_to_no_auth(self, raw):
        config = resolve_webhook_config(raw)

        assert config.auth_type is AuthType.NONE
        assert config.additional_headers == {}
        assert config.retry_limit == 0

    def test_json_string_and_object_resolve_the_same(self):
        stored = {
            "authType": "api_key",
            "headerName": "X-Api-Key",
            "headerValue": "secret",
            "enableRetry": True,
            "maxRetries": 5,
        }

        from_string = resolve_webhook_config(json.dumps(stored))
        from_object = resolve_webhook_config(stored)

        assert from_string == from_object
        assert from_object.auth_type is AuthType.API_KEY
        assert from_object.header_name == "X-Api-Key"
        assert from_object.retry_limit == 5

    def test_resolved_config_passes_through(self):
        config = WebhookConfig(auth_type=AuthType.BEARER_TOKEN, header_value="t")
        assert resolve_webhook_config(config) is config

    def test_invalid_json_string_raises(self):
        with pytest.raises(WebhookConfigError, match="not valid JSON"):
            resolve_webhook_config("{not json")

    def test_non_object_json_raises(self):
        with pytest.raises(WebhookConfigError, match="must be an object"):
            resolve_webhook_config("[1, 2, 3]")

    @pytest.mark.parametrize("auth_type", ["oauth2", "", 7])
    def test_unknown_stored_auth_type_falls_back_to_no_auth(self, auth_type):
        config = resolve_webhook_config({
            "authType": auth_type,
            "headerValue": "tok",
            "additionalHeaders": {"X-Source": "formhook"},
        })

        assert config.auth_type is AuthType.NONE
        assert build_webhook_headers(config) == {"X-Source": "formhook"}

    def test_direct_model_still_rejects_unknown_auth_type(self):
        with pytest.raises(ValidationError):
            WebhookConfig.model_validate({"authType": "oauth2"})

    def test_invalid_field_raises(self):
        with pytest.raises(WebhookConfigError, match="Invalid webhook config"):
            resolve_webhook_config({"enableRetry": True, "maxRetries": "many"})

    def test_retry_limit_rules(self):
        assert resolve_webhook_config({"enableRetry": False, "maxRetries": 7}).retry_limit == 0
        assert resolve_webhook_config({"enableRetry": True}).retry_limit == 3
        # zero with retry enabled falls back to the default
        assert resolve_webhook_config({"enableRetry": True, "maxRetries": 0}).retry_limit == 3
        assert resolve_webhook_config({"enableRetry": True, "maxRetries": 1}).retry_limit == 1


class TestBuildWebhookHeaders:
    """Tests for build_webhook_headers."""

    def test_every_auth_type_has_a_builder(self):
        assert set(AUTH_HEADER_BUILDERS) == set(AuthType)

    def test_none_adds_no_headers(self):
        assert build_webhook_headers(WebhookConfig()) == {}

    @pytest.mark.parametrize("extra", [
        {},
        {"headerName": "X-Ignored", "enableRetry": True, "maxRetries": 2},
    ])
    def test_bearer_token_header(self, extra):
        config = resolve_webhook_config({"authType": "bearer_token", "headerValue": "tok123", **extra})
        assert build_webhook_headers(config) == {"Authorization": "Bearer tok123"}

    def test_bearer_token_without_value_still_sends_header(self):
        config = resolve_webhook_config({"authType": "bearer_token"})
        assert build_webhook_headers(config) == {"Authorization": "Bearer "}

    def test_bearer_token_with_additional_headers(self):
        config = resolve_webhook_config({
            "authType": "bearer_token",
            "headerValue": "tok",
            "additionalHeaders": {"X-Source": "formhook"},
        })
        assert build_webhook_headers(config) == {
            "Authorization": "Bearer tok",
            "X-Source": "formhook",
        }

    def test_api_key_uses_header_name_verbatim(self):
        config = resolve_webhook_config({
            "authType": "api_key",
            "headerName": "X-API-KEY",
            "headerValue": "abc",
        })
        assert build_webhook_headers(config) == {"X-API-KEY": "abc"}

    @pytest.mark.parametrize("partial", [
        {"headerName": "X-Api-Key"},
        {"headerValue": "abc"},
        {},
    ])
    def test_incomplete_api_key_adds_nothing(self, partial):
        config = resolve_webhook_config({
            "authType": "api_key",
            "additionalHeaders": {"X-Trace": "1"},
            **partial,
        })
        assert build_webhook_headers(config) == {"X-Trace": "1"}

    def test_basic_auth_encodes_credentials(self):
        config = resolve_webhook_config({"authType": "basic_auth", "headerValue": "user:pass"})
        expected = base64.b64encode(b"user:pass").decode()
        assert build_webhook_headers(config) == {"Authorization": f"Basic {expected}"}

    def test_basic_auth_does_not_validate_shape(self):
        config = resolve_webhook_config({"authType": "basic_auth", "headerValue": "no-colon"})
        assert build_webhook_headers(config)["Authorization"] == "Basic " + base64.b64encode(b"no-colon").decode()

    def test_basic_auth_without_value_adds_nothing(self):
        config = resolve_webhook_config({"authType": "basic_auth"})
        assert build_webhook_headers(config) == {}

    def test_additional_headers_override_auth_header(self):
        config = resolve_webhook_config({
            "authType": "bearer_token",
            "headerValue": "tok",
            "additionalHeaders": {"Authorization": "Custom xyz"},
        })
        assert build_webhook_headers(config) == {"Authorization": "Custom xyz"}
