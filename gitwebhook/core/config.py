from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "gitwebhook"

    # Provider defaults, used when a WebhookSpec has no api_url override
    GITHUB_API_URL: str = "https://api.github.com"
    GITLAB_API_URL: str = "https://gitlab.com/api/v4"

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = 30.0
    HOOK_PAGE_SIZE: int = 100

    # Keys looked up inside referenced secrets
    WEBHOOK_SECRET_KEY: str = "secret"
    GIT_TOKEN_KEY: str = "token"

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_prefix="GITWEBHOOK_",
        extra="ignore",
    )


settings = Settings()
