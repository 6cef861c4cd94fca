"""
Error taxonomy for webhook reconciliation.

Validation errors are permanent and raised before any network call.
TargetNotFound and CredentialError let the caller tell a missing repository
or a broken secret apart from a provider outage (HTTPRequestError).
"""

from typing import Optional


class GitWebhookError(Exception):
    """Base class for all errors raised by gitwebhook."""


class WebhookValidationError(GitWebhookError, ValueError):
    """The declared webhook cannot be translated into a provider request."""


class UnknownEventType(WebhookValidationError):
    def __init__(self, name: str, provider: Optional[str] = None):
        self.name = name
        self.provider = provider
        suffix = f" for {provider}" if provider else ""
        super().__init__(f"unknown event type{suffix}: {name}")


class TargetNotFound(GitWebhookError):
    def __init__(self, owner: str, name: str):
        self.owner = owner
        self.name = name
        super().__init__(f"repository not found: {owner}/{name}")


class CredentialError(GitWebhookError):
    """A token or shared secret is missing or cannot be read."""


class ClientConstructionError(GitWebhookError):
    """The API client cannot be built, usually because of a bad base URL."""
