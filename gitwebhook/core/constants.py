"""
Shared Constants

Centralized constants used across the providers and the reconciler.
"""

from typing import Dict, FrozenSet, Tuple

PROVIDER_GITHUB = "github"
PROVIDER_GITLAB = "gitlab"

# GitHub list endpoints accept at most 100 items per page
MAX_PAGE_SIZE = 100

WEBHOOK_ALLOWED_URL_SCHEMES: Tuple[str, ...] = ("http", "https")

GITHUB_CONTENT_TYPES: FrozenSet[str] = frozenset({"json", "form"})

# GitHub encodes insecure_ssl as a string in the hook config map
GITHUB_INSECURE_SSL_ON = "1"
GITHUB_INSECURE_SSL_OFF = "0"

# Event names accepted by GitHub repository webhooks. "*" subscribes to all.
GITHUB_WEBHOOK_EVENTS: FrozenSet[str] = frozenset(
    {
        "*",
        "branch_protection_configuration",
        "branch_protection_rule",
        "check_run",
        "check_suite",
        "code_scanning_alert",
        "commit_comment",
        "create",
        "custom_property_values",
        "delete",
        "dependabot_alert",
        "deploy_key",
        "deployment",
        "deployment_protection_rule",
        "deployment_review",
        "deployment_status",
        "discussion",
        "discussion_comment",
        "fork",
        "gollum",
        "issue_comment",
        "issues",
        "label",
        "member",
        "merge_group",
        "meta",
        "milestone",
        "package",
        "page_build",
        "project",
        "project_card",
        "project_column",
        "public",
        "pull_request",
        "pull_request_review",
        "pull_request_review_comment",
        "pull_request_review_thread",
        "push",
        "registry_package",
        "release",
        "repository",
        "repository_advisory",
        "repository_import",
        "repository_ruleset",
        "repository_vulnerability_alert",
        "secret_scanning_alert",
        "secret_scanning_alert_location",
        "security_and_analysis",
        "star",
        "status",
        "team_add",
        "watch",
        "workflow_job",
        "workflow_run",
    }
)

# GitLab project hooks carry one boolean per event type
GITLAB_EVENT_FIELDS: Tuple[str, ...] = (
    "confidential_issues_events",
    "confidential_note_events",
    "deployment_events",
    "issues_events",
    "job_events",
    "merge_requests_events",
    "note_events",
    "pipeline_events",
    "push_events",
    "releases_events",
    "tag_push_events",
    "wiki_page_events",
)

# Older manifests spell the release events in CamelCase
GITLAB_EVENT_ALIASES: Dict[str, str] = {
    "ReleasesEvents": "releases_events",
}

# Provider-assigned or volatile fields, never part of the equivalence check
GITHUB_VOLATILE_HOOK_FIELDS: FrozenSet[str] = frozenset(
    {
        "id",
        "name",
        "type",
        "created_at",
        "updated_at",
        "url",  # API URL of the hook itself, the callback lives in config.url
        "test_url",
        "ping_url",
        "deliveries_url",
        "last_response",
    }
)

GITLAB_VOLATILE_HOOK_FIELDS: FrozenSet[str] = frozenset(
    {
        "id",
        "project_id",
        "created_at",
        "alert_status",
        "disabled_until",
    }
)

# Providers either redact or omit these, so they are never compared
SECRET_HOOK_FIELDS: FrozenSet[str] = frozenset({"secret", "token"})

# Canonical field names compared between the desired and the actual hook
HOOK_FIELD_URL = "url"
HOOK_FIELD_EVENTS = "events"
HOOK_FIELD_ACTIVE = "active"
HOOK_FIELD_CONTENT_TYPE = "content_type"
HOOK_FIELD_INSECURE_SSL = "insecure_ssl"
HOOK_FIELD_BRANCH_FILTER = "branch_filter"

# Reconciliation outcomes, used for logging and metrics
ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_UNCHANGED = "unchanged"
ACTION_DELETED = "deleted"
ACTION_ABSENT = "absent"
