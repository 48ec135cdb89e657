"""
Exceptions raised by FormHook services.
"""


class FormHookError(Exception):
    """Base class for FormHook errors."""


class WebhookConfigError(FormHookError):
    """A form's stored webhook configuration could not be parsed."""
