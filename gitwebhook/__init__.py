"""
gitwebhook converges declared webhooks onto GitHub repositories and GitLab projects.

Typical use:

    store = InMemorySecretStore()
    reconciler = WebhookReconciler(CredentialResolver(store))
    await reconciler.reconcile(GitWebhook.model_validate(manifest))
"""

from gitwebhook.core.exceptions import (
    ClientConstructionError,
    CredentialError,
    GitWebhookError,
    TargetNotFound,
    UnknownEventType,
    WebhookValidationError,
)
from gitwebhook.core.http_utils import HTTPRequestError
from gitwebhook.models.webhook import GitServerConfig, GitWebhook, SecretReference, WebhookSpec
from gitwebhook.services.credentials import CredentialResolver, InMemorySecretStore, SecretStore
from gitwebhook.services.reconciler import WebhookReconciler

__all__ = [
    "WebhookReconciler",
    "CredentialResolver",
    "SecretStore",
    "InMemorySecretStore",
    "GitWebhook",
    "WebhookSpec",
    "GitServerConfig",
    "SecretReference",
    "GitWebhookError",
    "WebhookValidationError",
    "UnknownEventType",
    "TargetNotFound",
    "CredentialError",
    "ClientConstructionError",
    "HTTPRequestError",
]
