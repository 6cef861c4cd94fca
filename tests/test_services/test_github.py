"""Tests for GitHubHookProvider.

Covers client construction, desired-view translation, equivalence
normalization, repository resolution and hook lookup against FakeGitHub.
"""

import asyncio
from typing import Optional

import pytest

from gitwebhook.core.config import Settings
from gitwebhook.core.exceptions import ClientConstructionError, TargetNotFound, UnknownEventType
from gitwebhook.core.http_utils import HTTPRequestError
from gitwebhook.models.github_api import GitHubHook
from gitwebhook.services.providers.base import TargetRef
from gitwebhook.services.providers.github import GitHubHookProvider
from tests.mocks.github import FakeGitHub, make_github_spec, make_hook, make_repository


def _run(fake: FakeGitHub, coro_factory, page_size: int = 100, token: str = "ghp-test-token"):
    async def run():
        async with GitHubHookProvider.build_client(token, transport=fake.transport) as client:
            return await coro_factory(GitHubHookProvider(client, page_size=page_size))

    return asyncio.run(run())


class TestGitHubClientFactory:
    def test_default_base_url(self):
        client = GitHubHookProvider.build_client("token")
        assert client.base_url == "https://api.github.com"
        assert client.service_name == "GitHub API"

    def test_enterprise_base_url(self):
        client = GitHubHookProvider.build_client("token", "https://github.corp.example.com/api/v3/")
        assert client.base_url == "https://github.corp.example.com/api/v3"

    def test_default_from_injected_settings(self):
        custom = Settings(_env_file=None, GITHUB_API_URL="https://ghe.example.com/api/v3")
        client = GitHubHookProvider.build_client("token", settings=custom)
        assert client.base_url == "https://ghe.example.com/api/v3"

    def test_explicit_url_beats_settings(self):
        custom = Settings(_env_file=None, GITHUB_API_URL="https://ghe.example.com/api/v3")
        client = GitHubHookProvider.build_client("token", "https://github.corp.example.com/api/v3", settings=custom)
        assert client.base_url == "https://github.corp.example.com/api/v3"

    def test_invalid_base_url_raises(self):
        with pytest.raises(ClientConstructionError, match="github url"):
            GitHubHookProvider.build_client("token", "not a url")

    def test_sends_bearer_token(self):
        fake = FakeGitHub(org_repos={"acme": [make_repository("widgets")]})
        _run(fake, lambda provider: provider.resolve_target("acme", "widgets"))
        assert fake.requests[0].headers["authorization"] == "Bearer ghp-test-token"
        assert fake.requests[0].headers["accept"] == "application/vnd.github+json"

    def test_empty_token_sends_no_authorization(self):
        fake = FakeGitHub(org_repos={"acme": [make_repository("widgets")]})
        _run(fake, lambda provider: provider.resolve_target("acme", "widgets"), token="")
        assert "authorization" not in fake.requests[0].headers


class TestGitHubDesiredView:
    def setup_method(self):
        self.provider = GitHubHookProvider(client=None)

    def test_config_map(self):
        view = self.provider.build_desired_view(make_github_spec(insecure_ssl=True), "s3cr3t")
        assert view.name == "web"
        assert view.active is True
        assert view.events == ["pull_request", "push"]
        assert view.config.url == "https://ci.example.com/hook"
        assert view.config.content_type == "json"
        assert view.config.insecure_ssl == "1"
        assert view.config.secret == "s3cr3t"

    def test_secure_ssl_encoded_as_zero(self):
        view = self.provider.build_desired_view(make_github_spec(insecure_ssl=False), "")
        assert view.config.insecure_ssl == "0"

    def test_empty_secret_omitted_from_payload(self):
        view = self.provider.build_desired_view(make_github_spec(), "")
        assert "secret" not in view.model_dump(exclude_none=True)["config"]

    def test_wildcard_event_accepted(self):
        view = self.provider.build_desired_view(make_github_spec(events=["*"]), "")
        assert view.events == ["*"]

    def test_unknown_event_rejected(self):
        with pytest.raises(UnknownEventType, match="not_a_real_event") as exc_info:
            self.provider.build_desired_view(make_github_spec(events=["push", "not_a_real_event"]), "")
        assert exc_info.value.provider == "github"


class TestGitHubEquivalence:
    def setup_method(self):
        self.provider = GitHubHookProvider(client=None)
        self.desired = self.provider.build_desired_view(make_github_spec(), "s3cr3t")

    def _actual(self, **kwargs) -> GitHubHook:
        return GitHubHook.model_validate(make_hook(**kwargs))

    def test_matching_hook_is_equivalent(self):
        assert self.provider.diff(self.desired, self._actual()) == []

    def test_volatile_fields_and_secret_ignored(self):
        actual = make_hook(id=999)
        actual["created_at"] = "2020-01-01T00:00:00Z"
        actual["updated_at"] = "2030-01-01T00:00:00Z"
        actual["config"]["secret"] = "something-else"
        assert self.provider.diff(self.desired, GitHubHook.model_validate(actual)) == []

    def test_numeric_insecure_ssl_normalized(self):
        actual = make_hook()
        actual["config"]["insecure_ssl"] = 0
        assert self.provider.diff(self.desired, GitHubHook.model_validate(actual)) == []

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"events": ["push"]}, "events"),
            ({"url": "https://ci.example.com/other"}, "url"),
            ({"active": False}, "active"),
            ({"content_type": "form"}, "content_type"),
            ({"insecure_ssl": "1"}, "insecure_ssl"),
        ],
    )
    def test_meaningful_difference_detected(self, kwargs, field):
        differences = self.provider.diff(self.desired, self._actual(**kwargs))
        assert [d.field for d in differences] == [field]


class TestGitHubResolveTarget:
    def test_found_in_organization(self):
        fake = FakeGitHub(org_repos={"acme": [make_repository("gadgets", id=1), make_repository("widgets", id=2)]})
        target = _run(fake, lambda provider: provider.resolve_target("acme", "widgets"))
        assert target == TargetRef(id=2, owner="acme", name="widgets")
        assert len(fake.requests) == 1
        assert fake.requests[0].url.path == "/orgs/acme/repos"

    def test_falls_back_to_user(self):
        fake = FakeGitHub(user_repos={"jdoe": [make_repository("widgets", owner="jdoe", id=5)]})
        target = _run(fake, lambda provider: provider.resolve_target("jdoe", "widgets"))
        assert target == TargetRef(id=5, owner="jdoe", name="widgets")
        assert [r.url.path for r in fake.requests] == ["/orgs/jdoe/repos", "/users/jdoe/repos"]

    def test_org_without_repo_falls_back_to_user(self):
        fake = FakeGitHub(
            org_repos={"acme": [make_repository("gadgets")]},
            user_repos={"acme": [make_repository("widgets", id=9)]},
        )
        target = _run(fake, lambda provider: provider.resolve_target("acme", "widgets"))
        assert target.id == 9

    def test_consumes_all_pages_before_falling_back(self):
        repos = [make_repository(f"repo-{i}", id=i) for i in range(5)] + [make_repository("widgets", id=77)]
        fake = FakeGitHub(org_repos={"acme": repos})
        target = _run(fake, lambda provider: provider.resolve_target("acme", "widgets"), page_size=2)
        assert target.id == 77
        assert [r.url.params["page"] for r in fake.requests] == ["1", "2", "3"]

    def test_name_match_is_case_sensitive(self):
        fake = FakeGitHub(org_repos={"acme": [make_repository("Widgets")]}, user_repos={"acme": []})
        with pytest.raises(TargetNotFound, match="acme/widgets"):
            _run(fake, lambda provider: provider.resolve_target("acme", "widgets"))

    def test_not_found_anywhere(self):
        fake = FakeGitHub()
        with pytest.raises(TargetNotFound):
            _run(fake, lambda provider: provider.resolve_target("ghost", "widgets"))

    def test_server_error_is_not_treated_as_missing(self):
        fake = FakeGitHub(org_repos={"acme": [make_repository("widgets")]})
        fake.fail_with = 503
        with pytest.raises(HTTPRequestError) as exc_info:
            _run(fake, lambda provider: provider.resolve_target("acme", "widgets"))
        assert exc_info.value.status_code == 503


class TestGitHubLocateHook:
    target = TargetRef(id=2, owner="acme", name="widgets")

    def _locate(self, fake: FakeGitHub, page_size: int = 100) -> Optional[GitHubHook]:
        return _run(
            fake,
            lambda provider: provider.locate_hook(self.target, "https://ci.example.com/hook"),
            page_size=page_size,
        )

    def test_found_on_first_page(self):
        fake = FakeGitHub(hooks={("acme", "widgets"): [make_hook(id=3)]})
        hook = self._locate(fake)
        assert hook.id == 3
        assert hook.config.url == "https://ci.example.com/hook"

    def test_found_on_last_page(self):
        others = [make_hook(id=i, url=f"https://other.example.com/{i}") for i in range(1, 6)]
        fake = FakeGitHub(hooks={("acme", "widgets"): others + [make_hook(id=42)]})
        hook = self._locate(fake, page_size=2)
        assert hook.id == 42
        assert len(fake.requests) == 3

    def test_single_page_without_match_stops(self):
        fake = FakeGitHub(hooks={("acme", "widgets"): [make_hook(id=1, url="https://other.example.com")]})
        assert self._locate(fake) is None
        assert len(fake.requests) == 1

    def test_empty_listing(self):
        fake = FakeGitHub(hooks={("acme", "widgets"): []})
        assert self._locate(fake) is None

    def test_404_listing_is_not_found(self):
        assert self._locate(FakeGitHub()) is None

    def test_requests_page_size(self):
        fake = FakeGitHub(hooks={("acme", "widgets"): []})
        self._locate(fake)
        assert fake.requests[0].url.params["per_page"] == "100"

    def test_page_size_is_capped(self):
        fake = FakeGitHub(hooks={("acme", "widgets"): []})
        self._locate(fake, page_size=500)
        assert fake.requests[0].url.params["per_page"] == "100"


class TestGitHubHookCalls:
    target = TargetRef(id=2, owner="acme", name="widgets")

    def test_create_posts_config_map(self):
        fake = FakeGitHub(hooks={("acme", "widgets"): []})

        async def create(provider):
            view = provider.build_desired_view(make_github_spec(), "s3cr3t")
            return await provider.create_hook(self.target, view)

        hook = _run(fake, create)
        (request,) = fake.requests_for("POST")
        assert request.url.path == "/repos/acme/widgets/hooks"
        assert hook.config.url == "https://ci.example.com/hook"
        assert fake.hooks[("acme", "widgets")][0]["id"] == hook.id

    def test_update_patches_existing_id(self):
        fake = FakeGitHub(hooks={("acme", "widgets"): [make_hook(id=3, events=["push"])]})

        async def update(provider):
            view = provider.build_desired_view(make_github_spec(), "")
            existing = GitHubHook.model_validate(make_hook(id=3))
            return await provider.update_hook(self.target, existing, view)

        _run(fake, update)
        (request,) = fake.requests_for("PATCH")
        assert request.url.path == "/repos/acme/widgets/hooks/3"
        assert set(fake.hooks[("acme", "widgets")][0]["events"]) == {"push", "pull_request"}

    def test_delete_tolerates_already_deleted_hook(self):
        fake = FakeGitHub(hooks={("acme", "widgets"): []})
        gone = GitHubHook.model_validate(make_hook(id=3))
        _run(fake, lambda provider: provider.delete_hook(self.target, gone))
        assert len(fake.requests_for("DELETE")) == 1
