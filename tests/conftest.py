"""
Shared test fixtures and configuration.

Environment variables are set BEFORE any package imports so the settings
singleton never points at a real git server.
"""

import os
import sys

# Ensure the package is importable without installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ["GITWEBHOOK_GITHUB_API_URL"] = "https://api.github.com"
os.environ["GITWEBHOOK_GITLAB_API_URL"] = "https://gitlab.com/api/v4"
os.environ["GITWEBHOOK_LOG_LEVEL"] = "DEBUG"

import pytest  # noqa: E402

from gitwebhook.core.config import Settings  # noqa: E402
from gitwebhook.services.credentials import CredentialResolver, InMemorySecretStore  # noqa: E402


@pytest.fixture
def secret_store():
    """Secrets referenced by the default GitHub and GitLab test webhooks."""
    store = InMemorySecretStore()
    store.put("github-token", "ci", {"token": "ghp-test-token"})
    store.put("gitlab-token", "ci", {"token": "glpat-test-token"})
    store.put("hook-secret", "ci", {"secret": b"s3cr3t"})
    return store


@pytest.fixture
def credentials(secret_store):
    return CredentialResolver(secret_store)


@pytest.fixture
def small_pages():
    """Settings with a tiny page size so pagination is exercised."""
    return Settings(HOOK_PAGE_SIZE=2)
