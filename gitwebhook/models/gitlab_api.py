"""
Pydantic models for GitLab REST API project and project hook payloads.

Response models use extra="ignore" to silently discard fields we don't use.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class GitLabNamespace(BaseModel):
    """Namespace sub-object within a GitLab project response."""

    model_config = ConfigDict(extra="ignore")

    kind: Optional[str] = None
    id: int
    full_path: str


class GitLabProject(BaseModel):
    """Project from GET /groups/:id/projects or /users/:id/projects."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    path_with_namespace: Optional[str] = None
    namespace: Optional[GitLabNamespace] = None


class GitLabHookEvents(BaseModel):
    """One boolean per GitLab hook event type."""

    confidential_issues_events: bool = False
    confidential_note_events: bool = False
    deployment_events: bool = False
    issues_events: bool = False
    job_events: bool = False
    merge_requests_events: bool = False
    note_events: bool = False
    pipeline_events: bool = False
    push_events: bool = False
    releases_events: bool = False
    tag_push_events: bool = False
    wiki_page_events: bool = False


class GitLabProjectHook(GitLabHookEvents):
    """Hook from GET /projects/:id/hooks."""

    model_config = ConfigDict(extra="ignore")

    id: int
    project_id: Optional[int] = None
    url: str
    enable_ssl_verification: bool = True
    push_events_branch_filter: Optional[str] = None
    created_at: Optional[datetime] = None
    alert_status: Optional[str] = None
    disabled_until: Optional[datetime] = None


class GitLabHookRequest(GitLabHookEvents):
    """Body of POST /projects/:id/hooks and PUT /projects/:id/hooks/:hook_id."""

    url: str
    enable_ssl_verification: bool
    push_events_branch_filter: str = ""
    token: str = ""
