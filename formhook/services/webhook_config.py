"""
Webhook configuration resolution and outbound header construction.

A form stores its webhook configuration either as a JSON object or as a
JSON-encoded string. resolve_webhook_config collapses both shapes into a
single WebhookConfig; nothing downstream looks at the raw value again.
"""
import base64
import enum
import json
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from formhook.config import settings
from formhook.exceptions import WebhookConfigError
from formhook.logging_config import get_logger

log = get_logger(component="webhook_config")


class AuthType(str, enum.Enum):
    """Authentication scheme applied to outbound webhook requests."""
    NONE = "none"
    API_KEY = "api_key"
    BEARER_TOKEN = "bearer_token"
    BASIC_AUTH = "basic_auth"


class WebhookConfig(BaseModel):
    """
    Normalized webhook configuration.

    Field aliases match the keys written by the form editor, so stored
    configs validate as-is. Snake-case names are accepted as well.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str | None = None
    auth_type: AuthType = Field(default=AuthType.NONE, alias="authType")
    header_name: str | None = Field(default=None, alias="headerName")
    header_value: str | None = Field(default=None, alias="headerValue")
    additional_headers: dict[str, str] = Field(default_factory=dict, alias="additionalHeaders")
    enable_retry: bool = Field(default=False, alias="enableRetry")
    max_retries: int | None = Field(default=None, alias="maxRetries")

    @property
    def retry_limit(self) -> int:
        """
        Number of retries allowed after the first attempt.

        Retry disabled means a single attempt. An unset (or zero) maxRetries
        with retry enabled falls back to the configured default.
        """
        if not self.enable_retry:
            return 0
        return max(self.max_retries or settings.WEBHOOK_DEFAULT_MAX_RETRIES, 0)


def resolve_webhook_config(raw: Any) -> WebhookConfig:
    """
    Normalize a stored webhook configuration.

    Args:
        raw: None, a JSON string, a mapping, or an existing WebhookConfig

    Returns:
        WebhookConfig with auth_type defaulting to none. An unrecognised
        stored authType also resolves to none.

    Raises:
        WebhookConfigError: if the value cannot be parsed or validated
    """
    if raw is None or raw == "":
        return WebhookConfig()

    if isinstance(raw, WebhookConfig):
        return raw

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise WebhookConfigError(f"Webhook config is not valid JSON: {e}") from e
        # A stored JSON null means "nothing configured"
        if raw is None:
            return WebhookConfig()

    if not isinstance(raw, dict):
        raise WebhookConfigError(
            f"Webhook config must be an object, got {type(raw).__name__}"
        )

    auth_type = raw.get("authType", raw.get("auth_type"))
    if auth_type is not None and auth_type not in [a.value for a in AuthType]:
        # Rows written before authType was validated deliver without auth
        log.warning("webhook_config_unknown_auth_type", auth_type=str(auth_type))
        raw = {k: v for k, v in raw.items() if k not in ("authType", "auth_type")}

    try:
        return WebhookConfig.model_validate(raw)
    except ValidationError as e:
        raise WebhookConfigError(f"Invalid webhook config: {e.errors()[0]['msg']}") from e


def _no_auth(config: WebhookConfig) -> dict[str, str]:
    return {}


def _api_key_auth(config: WebhookConfig) -> dict[str, str]:
    # Incomplete api_key config is silently ignored
    if config.header_name and config.header_value:
        return {config.header_name: config.header_value}
    return {}


def _bearer_auth(config: WebhookConfig) -> dict[str, str]:
    return {"Authorization": f"Bearer {config.header_value or ''}"}


def _basic_auth(config: WebhookConfig) -> dict[str, str]:
    # header_value is expected as "user:password"; not validated
    if not config.header_value:
        return {}
    encoded = base64.b64encode(config.header_value.encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {encoded}"}


AUTH_HEADER_BUILDERS: dict[AuthType, Callable[[WebhookConfig], dict[str, str]]] = {
    AuthType.NONE: _no_auth,
    AuthType.API_KEY: _api_key_auth,
    AuthType.BEARER_TOKEN: _bearer_auth,
    AuthType.BASIC_AUTH: _basic_auth,
}

_missing_builders = set(AuthType) - set(AUTH_HEADER_BUILDERS)
if _missing_builders:
    raise RuntimeError(f"No auth header builder for: {sorted(m.value for m in _missing_builders)}")


def build_webhook_headers(config: WebhookConfig) -> dict[str, str]:
    """
    Build the outbound header set for a webhook request.

    Auth headers are applied first; additionalHeaders are overlaid after
    them and win on name collisions.
    """
    headers = dict(AUTH_HEADER_BUILDERS[config.auth_type](config))
    headers.update(config.additional_headers)
    return headers
