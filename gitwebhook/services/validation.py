"""
Shared validation functions for declared webhooks.

Used by the WebhookSpec model and by callers that admit changes to an
existing declaration.
"""

from typing import TYPE_CHECKING, Iterable, Optional

from gitwebhook.core.exceptions import WebhookValidationError
from gitwebhook.core.http_utils import is_absolute_http_url

if TYPE_CHECKING:
    from gitwebhook.models.webhook import WebhookSpec


def validate_webhook_url(url: str) -> str:
    """
    Validate that a URL is an absolute http(s) URL.

    Raises:
        ValueError: If the URL is empty or not absolute
    """
    if not url:
        raise ValueError("URL cannot be empty")
    if not is_absolute_http_url(url):
        raise ValueError(f"URL must be an absolute http(s) URL: {url}")
    return url


def validate_webhook_url_optional(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    return validate_webhook_url(url)


def validate_webhook_events(events: Iterable[str]) -> frozenset:
    """At least one event is required; names are checked per provider later."""
    if events is None or isinstance(events, (str, bytes)) or not isinstance(events, Iterable):
        raise ValueError("events must be a list of event names")
    events = list(events)
    if any(not isinstance(e, str) for e in events):
        raise ValueError("events must be a list of event names")
    events = frozenset(events)
    if not events:
        raise ValueError("At least one event type is required")
    if any(not e for e in events):
        raise ValueError("Event names cannot be empty")
    return events


def validate_update(old: "WebhookSpec", new: "WebhookSpec") -> None:
    """
    Reject changes that would orphan the hook registered for ``old``.

    Both arguments are WebhookSpec instances. The git server, the repository
    and the webhook URL identify the remote hook and cannot change in place.

    Raises:
        WebhookValidationError: If an immutable field differs
    """
    if old.github is not None and new.github is not None and old.github.api_url != new.github.api_url:
        raise WebhookValidationError("github server cannot be changed")
    if old.gitlab is not None and new.gitlab is not None and old.gitlab.api_url != new.gitlab.api_url:
        raise WebhookValidationError("gitlab server cannot be changed")
    if old.provider != new.provider:
        raise WebhookValidationError("git provider cannot be changed")
    if old.repository_owner != new.repository_owner:
        raise WebhookValidationError("repositoryOwner cannot be changed")
    if old.repository_name != new.repository_name:
        raise WebhookValidationError("repositoryName cannot be changed")
    if old.webhook_url != new.webhook_url:
        raise WebhookValidationError("webhookURL cannot be changed")
