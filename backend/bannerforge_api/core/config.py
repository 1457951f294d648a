"""Configuration and settings"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # OpenAI API
    openai_api_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4o-mini")
    openai_temperature: float = Field(default=0.7)
    generation_timeout: float = Field(default=60.0)

    # Auth backend: "memory" or "firebase"
    auth_backend: str = Field(default="memory")
    firebase_api_key: str = Field(default="")
    firebase_project_id: str = Field(default="")
    auth_emulator_host: str = Field(default="")

    # Document database: "memory" or "firestore"
    database_backend: str = Field(default="memory")
    firestore_emulator_host: str = Field(default="")

    # Optional partition key; when set every path is prefixed with artifacts/{tenant_id}/
    tenant_id: str = Field(default="")

    # Sharing
    share_base_url: str = Field(default="")

    # Frontend
    frontend_url: str = Field(default="http://localhost:3000")
    workspace_cookie: str = Field(default="bf_workspace")

    # Workspaces not touched for this many seconds are unmounted by the sweeper
    workspace_idle_timeout: float = Field(default=3600.0)
    workspace_sweep_interval: float = Field(default=300.0)

    # Environment
    environment: str = Field(default="development")

    # API Configuration
    api_title: str = "BannerForge API"
    api_version: str = "0.1.0"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
