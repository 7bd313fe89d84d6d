"""Client settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Dashboard sign-in credentials (used by main.info when not passed explicitly)
    massive_account_email: str = ""
    massive_account_password: str = ""

    # Upstream hosts
    dashboard_base_url: str = "https://massive.com"  # login + keys pages
    api_base_url: str = "https://api.polygon.io"  # accountservices REST API

    # Transport
    request_timeout: float = 30.0  # seconds, per request
    connect_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def dashboard_origin(self) -> str:
        return self.dashboard_base_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
