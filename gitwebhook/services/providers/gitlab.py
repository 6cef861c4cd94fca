import logging
from typing import Any, Dict, Iterable, Optional
from urllib.parse import quote

import httpx

from gitwebhook.core.config import Settings, settings as default_settings
from gitwebhook.core.constants import (
    GITLAB_EVENT_ALIASES,
    GITLAB_EVENT_FIELDS,
    GITLAB_VOLATILE_HOOK_FIELDS,
    HOOK_FIELD_BRANCH_FILTER,
    HOOK_FIELD_EVENTS,
    HOOK_FIELD_INSECURE_SSL,
    HOOK_FIELD_URL,
    PROVIDER_GITLAB,
)
from gitwebhook.core.exceptions import ClientConstructionError, TargetNotFound, UnknownEventType
from gitwebhook.core.http_utils import InstrumentedAsyncClient, is_absolute_http_url
from gitwebhook.models.gitlab_api import GitLabHookRequest, GitLabProject, GitLabProjectHook
from gitwebhook.models.webhook import WebhookSpec
from gitwebhook.services.equivalence import strip_excluded_fields
from gitwebhook.services.providers.base import HookProvider, TargetRef

logger = logging.getLogger(__name__)

_API_SUFFIX = "/api/v4"


def translate_events(events: Iterable[str]) -> Dict[str, bool]:
    """
    Map event names onto GitLab's per-event boolean fields.

    Every known field is present in the result; fields not requested are False.

    Raises:
        UnknownEventType: On the first name outside GITLAB_EVENT_FIELDS. No
        partial mapping is returned.
    """
    flags = {field: False for field in GITLAB_EVENT_FIELDS}
    for event in sorted(events):
        field = GITLAB_EVENT_ALIASES.get(event, event)
        if field not in flags:
            raise UnknownEventType(event, PROVIDER_GITLAB)
        flags[field] = True
    return flags


def enabled_events(hook: Any) -> frozenset:
    """Event fields switched on in a hook mapping or model."""
    if isinstance(hook, dict):
        return frozenset(field for field in GITLAB_EVENT_FIELDS if hook.get(field))
    return frozenset(field for field in GITLAB_EVENT_FIELDS if getattr(hook, field, False))


class GitLabHookProvider(HookProvider):
    """
    Project hooks on gitlab.com or a self-managed GitLab.

    Hooks carry one boolean per event type plus url, SSL verification,
    push branch filter and a token.
    """

    name = PROVIDER_GITLAB
    service_name = "GitLab API"
    compared_fields = (
        HOOK_FIELD_URL,
        HOOK_FIELD_EVENTS,
        HOOK_FIELD_INSECURE_SSL,
        HOOK_FIELD_BRANCH_FILTER,
    )
    volatile_fields = GITLAB_VOLATILE_HOOK_FIELDS

    @classmethod
    def build_client(
        cls,
        token: str,
        api_url: Optional[str] = None,
        timeout: float = 30.0,
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> InstrumentedAsyncClient:
        base_url = (api_url or (settings or default_settings).GITLAB_API_URL).rstrip("/")
        if not is_absolute_http_url(base_url):
            raise ClientConstructionError(f"Failed to create gitlab client, invalid url: {base_url}")
        if not base_url.endswith(_API_SUFFIX):
            base_url = f"{base_url}{_API_SUFFIX}"

        headers = {}
        if token:
            headers["PRIVATE-TOKEN"] = token
        return InstrumentedAsyncClient(
            cls.service_name, timeout=timeout, base_url=base_url, headers=headers, **kwargs
        )

    def _next_page(self, response: httpx.Response, page: int) -> Optional[int]:
        next_page = response.headers.get("x-next-page", "").strip()
        if not next_page:
            return None
        try:
            return int(next_page) or None
        except ValueError:
            logger.warning(f"Ignoring malformed X-Next-Page header: {next_page!r}")
            return None

    async def resolve_target(self, owner: str, name: str) -> TargetRef:
        encoded_owner = quote(owner, safe="")
        scopes = (
            ("group", f"/groups/{encoded_owner}/projects"),
            ("user", f"/users/{encoded_owner}/projects"),
        )
        for scope, path in scopes:
            found = await self._find_in_pages(
                path,
                f"list projects of {scope} {owner}",
                lambda project: project.get("name") == name,
            )
            if found is not None:
                project = GitLabProject.model_validate(found)
                return TargetRef(id=project.id, owner=owner, name=project.name)
            logger.debug(f"Project {owner}/{name} not found in {scope} scope")

        raise TargetNotFound(owner, name)

    async def locate_hook(self, target: TargetRef, callback_url: str) -> Optional[GitLabProjectHook]:
        found = await self._find_in_pages(
            f"/projects/{target.id}/hooks",
            f"list hooks of {target.full_name}",
            lambda hook: hook.get("url") == callback_url,
        )
        if found is None:
            return None
        return GitLabProjectHook.model_validate(found)

    def build_desired_view(self, spec: WebhookSpec, secret: str) -> GitLabHookRequest:
        flags = translate_events(spec.events)
        return GitLabHookRequest(
            url=spec.webhook_url,
            enable_ssl_verification=not spec.insecure_ssl,
            push_events_branch_filter=spec.push_events_branch_filter,
            token=secret,
            **flags,
        )

    def comparable_desired(self, view: GitLabHookRequest) -> Dict[str, Any]:
        return {
            HOOK_FIELD_URL: view.url,
            HOOK_FIELD_EVENTS: enabled_events(view),
            HOOK_FIELD_INSECURE_SSL: not view.enable_ssl_verification,
            HOOK_FIELD_BRANCH_FILTER: view.push_events_branch_filter,
        }

    def comparable_actual(self, hook: GitLabProjectHook) -> Dict[str, Any]:
        stripped = strip_excluded_fields(hook.model_dump(), self.volatile_fields)
        return {
            HOOK_FIELD_URL: stripped.get("url"),
            HOOK_FIELD_EVENTS: enabled_events(stripped),
            HOOK_FIELD_INSECURE_SSL: not stripped.get("enable_ssl_verification", True),
            HOOK_FIELD_BRANCH_FILTER: stripped.get("push_events_branch_filter"),
        }

    async def create_hook(self, target: TargetRef, view: GitLabHookRequest) -> GitLabProjectHook:
        response = await self.client.post(f"/projects/{target.id}/hooks", json=view.model_dump())
        self.client.ensure_success(response, f"create hook on {target.full_name}")
        return GitLabProjectHook.model_validate(response.json())

    async def update_hook(
        self, target: TargetRef, hook: GitLabProjectHook, view: GitLabHookRequest
    ) -> GitLabProjectHook:
        response = await self.client.put(f"/projects/{target.id}/hooks/{hook.id}", json=view.model_dump())
        self.client.ensure_success(response, f"update hook {hook.id} on {target.full_name}")
        return GitLabProjectHook.model_validate(response.json())

    async def delete_hook(self, target: TargetRef, hook: GitLabProjectHook) -> None:
        response = await self.client.delete(f"/projects/{target.id}/hooks/{hook.id}")
        if response.status_code == 404:
            logger.info(f"Hook {hook.id} on {target.full_name} already gone")
            return
        self.client.ensure_success(response, f"delete hook {hook.id} on {target.full_name}")
