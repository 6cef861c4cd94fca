"""
Webhook reconciliation.

WebhookReconciler is the long-lived entry point. Every reconcile/delete call
builds a fresh ReconciliationCall that owns the API client and memoizes the
resolved repository and hook for the remainder of that call only.
Errors propagate to the caller on the first failing step; nothing is retried.
"""

import logging
from typing import Optional, Type

from pydantic import BaseModel

from gitwebhook.core.config import Settings, settings as default_settings
from gitwebhook.core.constants import (
    ACTION_ABSENT,
    ACTION_CREATED,
    ACTION_DELETED,
    ACTION_UNCHANGED,
    ACTION_UPDATED,
)
from gitwebhook.core.metrics import record_action, track_reconciliation
from gitwebhook.models.webhook import GitWebhook, WebhookSpec
from gitwebhook.services.credentials import CredentialResolver
from gitwebhook.services.providers import PROVIDERS, HookProvider, TargetRef

logger = logging.getLogger(__name__)


class ReconciliationCall:
    """State of one reconcile or delete pass over a single GitWebhook."""

    def __init__(self, webhook: GitWebhook, provider: HookProvider, secret: str = ""):
        self.webhook = webhook
        self.spec: WebhookSpec = webhook.spec
        self.provider = provider
        self._secret = secret
        self._target: Optional[TargetRef] = None
        self._hook: Optional[BaseModel] = None
        self._hook_located = False

    async def target(self) -> TargetRef:
        if self._target is None:
            self._target = await self.provider.resolve_target(
                self.spec.repository_owner, self.spec.repository_name
            )
        return self._target

    async def hook(self) -> Optional[BaseModel]:
        if not self._hook_located:
            target = await self.target()
            self._hook = await self.provider.locate_hook(target, self.spec.webhook_url)
            self._hook_located = True
        return self._hook

    async def reconcile(self) -> str:
        # Translate first so invalid specs fail before any request
        desired = self.provider.build_desired_view(self.spec, self._secret)

        try:
            target = await self.target()
        except Exception as e:
            logger.error(f"Unable to resolve repository for {self.webhook.key}: {e}")
            raise

        actual = await self.hook()
        if actual is None:
            await self.provider.create_hook(target, desired)
            logger.info(f"Created {self.provider.name} hook for {self.webhook.key} on {target.full_name}")
            return ACTION_CREATED

        differences = self.provider.diff(desired, actual)
        if not differences:
            logger.debug(f"Hook for {self.webhook.key} on {target.full_name} is up to date")
            return ACTION_UNCHANGED

        logger.info(
            f"Updating {self.provider.name} hook {getattr(actual, 'id', '?')} for {self.webhook.key} "
            f"on {target.full_name}: {', '.join(d.field for d in differences)}"
        )
        await self.provider.update_hook(target, actual, desired)
        return ACTION_UPDATED

    async def delete(self) -> str:
        try:
            target = await self.target()
        except Exception as e:
            logger.error(f"Unable to resolve repository for {self.webhook.key}: {e}")
            raise

        hook = await self.hook()
        if hook is None:
            logger.debug(f"No hook for {self.webhook.key} on {target.full_name}, nothing to delete")
            return ACTION_ABSENT

        await self.provider.delete_hook(target, hook)
        logger.info(f"Deleted {self.provider.name} hook for {self.webhook.key} on {target.full_name}")
        return ACTION_DELETED


class WebhookReconciler:
    """
    Converges declared GitWebhooks onto GitHub or GitLab.

    Extra keyword arguments are passed to the underlying httpx.AsyncClient
    (e.g. ``transport`` or ``verify``).
    """

    def __init__(
        self,
        credentials: CredentialResolver,
        settings: Optional[Settings] = None,
        **client_kwargs,
    ):
        self.credentials = credentials
        self.settings = settings or default_settings
        self._client_kwargs = client_kwargs

    def _provider_class(self, spec: WebhookSpec) -> Type[HookProvider]:
        return PROVIDERS[spec.provider]

    async def reconcile(self, webhook: GitWebhook) -> None:
        """Create or update the remote hook so it matches ``webhook.spec``."""
        provider_cls = self._provider_class(webhook.spec)
        with track_reconciliation(provider_cls.name):
            token = await self.credentials.git_token(webhook)
            secret = await self.credentials.webhook_secret(webhook)
            async with self._build_client(provider_cls, token, webhook.spec) as client:
                call = ReconciliationCall(webhook, provider_cls(client, self.settings.HOOK_PAGE_SIZE), secret)
                action = await call.reconcile()
        record_action(provider_cls.name, action)

    async def delete(self, webhook: GitWebhook) -> None:
        """Delete the remote hook if it exists. The repository itself must exist."""
        provider_cls = self._provider_class(webhook.spec)
        with track_reconciliation(provider_cls.name):
            token = await self.credentials.git_token(webhook)
            async with self._build_client(provider_cls, token, webhook.spec) as client:
                call = ReconciliationCall(webhook, provider_cls(client, self.settings.HOOK_PAGE_SIZE))
                action = await call.delete()
        record_action(provider_cls.name, action)

    def _build_client(self, provider_cls: Type[HookProvider], token: str, spec: WebhookSpec):
        return provider_cls.build_client(
            token,
            spec.server.api_url,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            settings=self.settings,
            **self._client_kwargs,
        )
