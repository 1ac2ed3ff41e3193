from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="studygen", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class ClientSettings(BaseSettings):
    """Settings for the orchestration side that talks to the service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    base_url: str = Field(default="http://localhost:9000", alias="STUDYGEN_BASE_URL")
    timeout_seconds: float = Field(default=90.0, alias="CLIENT_TIMEOUT_SECONDS")
    # Empirical throttle between quiz/flashcards and the matching request
    matching_dispatch_delay_seconds: float = Field(
        default=0.5, alias="MATCHING_DISPATCH_DELAY_SECONDS"
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    client: ClientSettings = Field(default_factory=lambda: ClientSettings())

    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")

    google_model: str = Field(default="gemini-2.5-pro", alias="GOOGLE_MODEL")
    google_title_model: str = Field(
        default="gemini-2.5-flash", alias="GOOGLE_TITLE_MODEL"
    )
    openai_model: str = Field(default="gpt-4o", alias="OPENAI_MODEL")

    # Upper bound for a single provider call (seconds)
    generation_timeout_seconds: float = Field(
        default=60.0, alias="GENERATION_TIMEOUT_SECONDS"
    )
    max_upload_mb: float = Field(default=5.0, alias="MAX_UPLOAD_MB")

    @computed_field
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)


settings = Settings()
