from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    # ===========================
    # Application Customization
    # ===========================
    APP_NAME: str = "Satoru Scraper"
    APP_VERSION: str = "1.0.0"

    # ===========================
    # Server Configuration
    # ===========================
    PORT: int = 3000

    # ===========================
    # Source Configuration
    # ===========================
    SATORU_URL: str = "https://satoru.one"
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )

    # ===========================
    # Cache Configuration
    # ===========================
    CACHE_TTL: int = 3600

    # ===========================
    # HTTP Timeout Configuration
    # ===========================
    HTTP_TIMEOUT: Optional[int] = None

    # ===========================
    # Logging Configuration
    # ===========================
    LOG_LEVEL: str = "INFO"

    # ===========================
    # Field Validators
    # ===========================
    @field_validator("SATORU_URL")
    @classmethod
    def normalize_urls(cls, v):
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


# ===========================
# Settings Instance
# ===========================
settings = Settings()
