from typing import Dict, Type

from gitwebhook.core.constants import PROVIDER_GITHUB, PROVIDER_GITLAB
from gitwebhook.services.providers.base import HookProvider, TargetRef
from gitwebhook.services.providers.github import GitHubHookProvider
from gitwebhook.services.providers.gitlab import GitLabHookProvider

PROVIDERS: Dict[str, Type[HookProvider]] = {
    PROVIDER_GITHUB: GitHubHookProvider,
    PROVIDER_GITLAB: GitLabHookProvider,
}

__all__ = [
    "PROVIDERS",
    "GitHubHookProvider",
    "GitLabHookProvider",
    "HookProvider",
    "TargetRef",
]
