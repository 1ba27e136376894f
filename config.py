from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from EXPENSE_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_",
        env_file=".env",
        extra="ignore",
    )

    database_url: str = "sqlite:///./expenses.db"
    secret_key: str = Field(
        "change-me-in-production",
        description="Key used to sign access tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    default_app_name: str = "MyExpenseApp"
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
