"""
Declared webhook models.

A GitWebhook names the declaration and the namespace its secrets live in;
its WebhookSpec is the desired state converged onto GitHub or GitLab.
Field aliases match the manifest keys, so manifests load with
``GitWebhook.model_validate(data)``.
"""

from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gitwebhook.core.constants import GITHUB_CONTENT_TYPES, PROVIDER_GITHUB, PROVIDER_GITLAB
from gitwebhook.services.validation import (
    validate_webhook_events,
    validate_webhook_url,
    validate_webhook_url_optional,
)


class SecretReference(BaseModel):
    """Reference to a secret in the same namespace as the GitWebhook."""

    model_config = ConfigDict(frozen=True)

    name: str = ""


class GitServerConfig(BaseModel):
    """Connection settings for one git server."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_url: Optional[str] = Field(
        None,
        alias="gitAPIServerURL",
        description="API base URL; the provider default is used when unset",
    )
    credentials: SecretReference = Field(
        default_factory=SecretReference,
        alias="gitServerCredentials",
        description="Secret holding a 'token' key used to authenticate",
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_webhook_url_optional(v)


class WebhookSpec(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    github: Optional[GitServerConfig] = Field(None, alias="gitHub")
    gitlab: Optional[GitServerConfig] = Field(None, alias="gitLab")

    repository_owner: str = Field(
        ...,
        alias="RepositoryOwner",
        min_length=1,
        description="Organization/group or user owning the repository",
    )
    repository_name: str = Field(..., alias="repositoryName", min_length=1)
    webhook_url: str = Field(..., alias="webhookURL", description="Callback URL called by the provider")

    events: FrozenSet[str] = Field(..., description="Event names the hook subscribes to")
    active: bool = True  # github only
    content_type: str = Field("json", alias="content")  # github only
    insecure_ssl: bool = Field(False, alias="insecureSSL")
    push_events_branch_filter: str = Field("", alias="pushEventBranchFilter")  # gitlab only

    webhook_secret: SecretReference = Field(default_factory=SecretReference, alias="webhookSecret")

    @field_validator("webhook_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return validate_webhook_url(v)

    @field_validator("events", mode="before")
    @classmethod
    def validate_events(cls, v):
        return validate_webhook_events(v)

    @field_validator("content_type")
    @classmethod
    def validate_content_type(cls, v: str) -> str:
        if v not in GITHUB_CONTENT_TYPES:
            raise ValueError(f"content type must be one of {sorted(GITHUB_CONTENT_TYPES)}")
        return v

    @model_validator(mode="after")
    def validate_only_one_git_server(self) -> "WebhookSpec":
        if (self.github is None) == (self.gitlab is None):
            raise ValueError("exactly one of gitlab and github must be initialized")
        return self

    @property
    def provider(self) -> str:
        return PROVIDER_GITHUB if self.github is not None else PROVIDER_GITLAB

    @property
    def server(self) -> GitServerConfig:
        return self.github if self.github is not None else self.gitlab

    def references_secret(self, secret_name: str) -> bool:
        """True when a change to ``secret_name`` affects this webhook."""
        if not secret_name:
            return False
        return secret_name in (self.webhook_secret.name, self.server.credentials.name)


class GitWebhook(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str = "default"
    spec: WebhookSpec

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"
