"""Application configuration management"""

from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables"""

    # Application
    APP_NAME: str = "RFT Careers Portal"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Remote recruitment API
    API_BASE_URL: str = "http://localhost:5000"
    APPLICATION_UPLOAD_PATH: str = "/application/upload"
    ENQUIRY_UPLOAD_PATH: str = "/upload"
    APPLICANTS_PATH: str = "/application/api/applicants"
    SEND_EMAIL_PATH: str = "/application/api/send-email"
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Draft storage
    REDIS_URL: str = "redis://localhost:6379/0"
    DRAFT_KEY_PREFIX: str = "formData_"
    DRAFT_TTL_SECONDS: Optional[int] = None

    # Application form rules
    # 1950 rather than 1050 so that years such as 1899 fail; see DESIGN.md, decision 1
    GRADUATION_YEAR_MIN: int = 1950
    GRADUATION_YEAR_MAX: int = 2030
    MAX_EXPECTED_CTC: int = 10_000_000

    # Reviewer notifications
    DEFAULT_NOTIFICATION_LINK: str = "https://your-test-link.com"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @field_validator("API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        # Paths are joined with a leading slash
        return v.rstrip("/")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )


# Global settings instance
settings = Settings()
