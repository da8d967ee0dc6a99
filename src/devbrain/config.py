"""Configuration management for DevBrain."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DEVBRAIN_",
        extra="ignore",
        populate_by_name=True,
    )

    # OpenAI
    openai_api_key: str = Field(alias="OPENAI_API_KEY")
    openai_model: str = "gpt-5-mini"

    # Storage (relative to data root)
    data_root: Path = Field(default_factory=Path.cwd)
    seed_samples: bool = True

    # Diagram rendering service (mermaid.ink compatible)
    mermaid_url: str = "https://mermaid.ink"
    mermaid_timeout: float = 20.0

    # Server
    port: int = 8430
    host: str = "127.0.0.1"

    # Processing
    max_retries: int = 5
    retry_base_delay: float = 1.0

    @property
    def devbrain_path(self) -> Path:
        return self.data_root / ".devbrain"

    @property
    def store_path(self) -> Path:
        return self.devbrain_path / "store.json"

    @property
    def error_log_path(self) -> Path:
        return self.devbrain_path / "error.log"

    def get_allowed_origins(self) -> set[str]:
        """Origins allowed to send state-changing requests to the dashboard."""
        return {
            f"http://{self.host}:{self.port}",
            f"http://localhost:{self.port}",
            f"http://127.0.0.1:{self.port}",
        }


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
