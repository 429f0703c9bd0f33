from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MESSAGING_API_URL = "http://localhost:8080/api"
DEFAULT_PLACEHOLDER_AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

# Project root (parent of market_chat/) - used so .env is found regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Explicitly load .env into os.environ so it works in tests and subprocesses
load_dotenv(_PROJECT_ROOT / ".env")


class Settings(BaseSettings):
    app_name: str = "market-chat"
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENV", "ENVIRONMENT"),
    )
    log_level: str = Field(default="INFO", json_schema_extra={"env": "LOG_LEVEL"})

    # Messaging / favorites REST API
    messaging_api_url: str = Field(
        default=DEFAULT_MESSAGING_API_URL,
        json_schema_extra={"env": "MESSAGING_API_URL"},
    )
    api_token: Optional[str] = Field(
        default=None, json_schema_extra={"env": "API_TOKEN"}
    )
    request_timeout_seconds: float = Field(
        default=10.0, gt=0, json_schema_extra={"env": "REQUEST_TIMEOUT_SECONDS"}
    )

    # Chat policies
    recall_window_seconds: int = Field(
        default=120, ge=0, json_schema_extra={"env": "RECALL_WINDOW_SECONDS"}
    )
    divider_gap_seconds: int = Field(
        default=300, ge=0, json_schema_extra={"env": "DIVIDER_GAP_SECONDS"}
    )
    max_image_bytes: int = Field(
        default=5 * 1024 * 1024, gt=0, json_schema_extra={"env": "MAX_IMAGE_BYTES"}
    )

    # Presentation defaults
    toast_duration_seconds: float = Field(
        default=3.0, ge=0, json_schema_extra={"env": "TOAST_DURATION_SECONDS"}
    )
    placeholder_avatar_url: str = Field(
        default=DEFAULT_PLACEHOLDER_AVATAR_URL,
        json_schema_extra={"env": "PLACEHOLDER_AVATAR_URL"},
    )
    default_partner_name: str = Field(
        default="同学", json_schema_extra={"env": "DEFAULT_PARTNER_NAME"}
    )

    @property
    def is_production(self) -> bool:
        """Check if the current environment is production."""
        return self.environment.lower() == "production"

    @property
    def is_test(self) -> bool:
        """Check if the current environment is test."""
        return self.environment.lower() == "test"

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings from the environment and .env file."""
    return Settings()
