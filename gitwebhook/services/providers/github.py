import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from gitwebhook.core.config import Settings, settings as default_settings
from gitwebhook.core.constants import (
    GITHUB_INSECURE_SSL_OFF,
    GITHUB_INSECURE_SSL_ON,
    GITHUB_VOLATILE_HOOK_FIELDS,
    GITHUB_WEBHOOK_EVENTS,
    HOOK_FIELD_ACTIVE,
    HOOK_FIELD_CONTENT_TYPE,
    HOOK_FIELD_EVENTS,
    HOOK_FIELD_INSECURE_SSL,
    HOOK_FIELD_URL,
    PROVIDER_GITHUB,
)
from gitwebhook.core.exceptions import ClientConstructionError, TargetNotFound, UnknownEventType
from gitwebhook.core.http_utils import InstrumentedAsyncClient, is_absolute_http_url
from gitwebhook.models.github_api import GitHubHook, GitHubHookConfig, GitHubHookRequest, GitHubRepository
from gitwebhook.models.webhook import WebhookSpec
from gitwebhook.services.equivalence import strip_excluded_fields
from gitwebhook.services.providers.base import HookProvider, TargetRef

logger = logging.getLogger(__name__)


def _path(*segments: str) -> str:
    return "/" + "/".join(quote(str(s), safe="") for s in segments)


class GitHubHookProvider(HookProvider):
    """
    Repository webhooks on github.com or GitHub Enterprise Server.

    Hooks carry an event-name list and a config map
    (url, content_type, insecure_ssl "0"/"1", secret).
    """

    name = PROVIDER_GITHUB
    service_name = "GitHub API"
    compared_fields = (
        HOOK_FIELD_URL,
        HOOK_FIELD_EVENTS,
        HOOK_FIELD_ACTIVE,
        HOOK_FIELD_CONTENT_TYPE,
        HOOK_FIELD_INSECURE_SSL,
    )
    volatile_fields = GITHUB_VOLATILE_HOOK_FIELDS

    @classmethod
    def build_client(
        cls,
        token: str,
        api_url: Optional[str] = None,
        timeout: float = 30.0,
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> InstrumentedAsyncClient:
        base_url = (api_url or (settings or default_settings).GITHUB_API_URL).rstrip("/")
        if not is_absolute_http_url(base_url):
            raise ClientConstructionError(f"Unable to parse github url: {base_url}")

        headers = {"Accept": "application/vnd.github+json", "X-GitHub-Api-Version": "2022-11-28"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return InstrumentedAsyncClient(
            cls.service_name, timeout=timeout, base_url=base_url, headers=headers, **kwargs
        )

    def _next_page(self, response: httpx.Response, page: int) -> Optional[int]:
        # Link header pagination
        link_header = response.headers.get("link", "")
        if 'rel="next"' not in link_header:
            return None
        return page + 1

    async def resolve_target(self, owner: str, name: str) -> TargetRef:
        scopes = (
            ("organization", _path("orgs", owner, "repos"), {"type": "all"}),
            ("user", _path("users", owner, "repos"), {"type": "owner"}),
        )
        for scope, path, params in scopes:
            found = await self._find_in_pages(
                path,
                f"list repositories of {scope} {owner}",
                lambda repository: repository.get("name") == name,
                params=params,
            )
            if found is not None:
                repository = GitHubRepository.model_validate(found)
                return TargetRef(id=repository.id, owner=repository.owner.login, name=repository.name)
            logger.debug(f"Repository {owner}/{name} not found in {scope} scope")

        raise TargetNotFound(owner, name)

    async def locate_hook(self, target: TargetRef, callback_url: str) -> Optional[GitHubHook]:
        found = await self._find_in_pages(
            _path("repos", target.owner, target.name, "hooks"),
            f"list hooks of {target.full_name}",
            lambda hook: (hook.get("config") or {}).get("url") == callback_url,
        )
        if found is None:
            return None
        return GitHubHook.model_validate(found)

    def build_desired_view(self, spec: WebhookSpec, secret: str) -> GitHubHookRequest:
        for event in sorted(spec.events):
            if event not in GITHUB_WEBHOOK_EVENTS:
                raise UnknownEventType(event, PROVIDER_GITHUB)

        return GitHubHookRequest(
            active=spec.active,
            events=sorted(spec.events),
            config=GitHubHookConfig(
                url=spec.webhook_url,
                content_type=spec.content_type,
                insecure_ssl=GITHUB_INSECURE_SSL_ON if spec.insecure_ssl else GITHUB_INSECURE_SSL_OFF,
                secret=secret or None,
            ),
        )

    def comparable_desired(self, view: GitHubHookRequest) -> Dict[str, Any]:
        return {
            HOOK_FIELD_URL: view.config.url,
            HOOK_FIELD_EVENTS: view.events,
            HOOK_FIELD_ACTIVE: view.active,
            HOOK_FIELD_CONTENT_TYPE: view.config.content_type,
            HOOK_FIELD_INSECURE_SSL: view.config.insecure_ssl,
        }

    def comparable_actual(self, hook: GitHubHook) -> Dict[str, Any]:
        stripped = strip_excluded_fields(hook.model_dump(), self.volatile_fields)
        config = stripped.get("config") or {}
        return {
            HOOK_FIELD_URL: config.get("url"),
            HOOK_FIELD_EVENTS: stripped.get("events"),
            HOOK_FIELD_ACTIVE: stripped.get("active"),
            HOOK_FIELD_CONTENT_TYPE: config.get("content_type"),
            HOOK_FIELD_INSECURE_SSL: config.get("insecure_ssl"),
        }

    async def create_hook(self, target: TargetRef, view: GitHubHookRequest) -> GitHubHook:
        response = await self.client.post(
            _path("repos", target.owner, target.name, "hooks"),
            json=view.model_dump(exclude_none=True),
        )
        self.client.ensure_success(response, f"create hook on {target.full_name}")
        return GitHubHook.model_validate(response.json())

    async def update_hook(self, target: TargetRef, hook: GitHubHook, view: GitHubHookRequest) -> GitHubHook:
        response = await self.client.patch(
            _path("repos", target.owner, target.name, "hooks", str(hook.id)),
            json=view.model_dump(exclude_none=True),
        )
        self.client.ensure_success(response, f"update hook {hook.id} on {target.full_name}")
        return GitHubHook.model_validate(response.json())

    async def delete_hook(self, target: TargetRef, hook: GitHubHook) -> None:
        response = await self.client.delete(_path("repos", target.owner, target.name, "hooks", str(hook.id)))
        if response.status_code == 404:
            logger.info(f"Hook {hook.id} on {target.full_name} already gone")
            return
        self.client.ensure_success(response, f"delete hook {hook.id} on {target.full_name}")
