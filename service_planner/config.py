"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "service-planner"
    log_level: str = "INFO"

    # Defaults applied when a request leaves them out
    default_currency: str = "PHP"
    default_category: str = "Other"
    default_capacity_months: int = 12


settings = Settings()
