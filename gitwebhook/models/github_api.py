"""
Pydantic models for GitHub REST API webhook and repository payloads.

Response models use extra="ignore" to silently discard fields we don't use.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GitHubOwner(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str


class GitHubRepository(BaseModel):
    """Repository from GET /orgs/:org/repos or /users/:user/repos."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    owner: GitHubOwner


class GitHubHookConfig(BaseModel):
    """The configuration map of a repository hook."""

    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None
    content_type: Optional[str] = None
    # "0" or "1" on the wire; older servers return a number
    insecure_ssl: Optional[Any] = None
    secret: Optional[str] = None


class GitHubHook(BaseModel):
    """Hook from GET /repos/:owner/:repo/hooks."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: Optional[str] = None
    type: Optional[str] = None
    active: bool = True
    events: List[str] = Field(default_factory=list)
    config: GitHubHookConfig = Field(default_factory=GitHubHookConfig)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    url: Optional[str] = None
    test_url: Optional[str] = None
    ping_url: Optional[str] = None
    deliveries_url: Optional[str] = None
    last_response: Optional[Dict[str, Any]] = None


class GitHubHookRequest(BaseModel):
    """Body of POST /repos/:owner/:repo/hooks and PATCH .../hooks/:id."""

    name: str = "web"
    active: bool
    events: List[str]
    config: GitHubHookConfig
