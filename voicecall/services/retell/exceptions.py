"""Retell proxy exceptions."""
from typing import Optional


class RetellError(Exception):
    """Base exception for Retell proxy failures.

    The message of a ``RetellError`` is safe to return to callers.
    """


class RetellConfigurationError(RetellError):
    """Raised when a required server-side setting is missing."""

    def __init__(self, setting_name: str):
        self.setting_name = setting_name
        super().__init__(f"{setting_name} is not configured")


class RetellAPIError(RetellError):
    """Raised when the Retell API answers with a non-2xx status."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Retell API error: {status_code}")


class InvalidActionError(RetellError):
    """Raised for an action the proxy does not know."""

    def __init__(self, action: Optional[str] = None):
        self.action = action
        super().__init__(
            "Invalid action. Use: create-web-call, create-phone-call, or list-agents"
        )


class InvalidRequestError(RetellError):
    """Raised when the proxy request body is unusable."""
