from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MAXBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    token: str = ""
    base_url: str = "https://platform-api.max.ru"
    timeout: float = 30.0

    # Retry / pacing
    max_retries: int = 0
    initial_backoff: float = 0.25  # seconds
    max_backoff: float = 3.0  # seconds
    rate_limit_rps: float = 30  # 0 = default, negative = disabled

    # Long polling
    polling_limit: int = 100
    polling_timeout: int = 25  # seconds, server-side long-poll window
    polling_idle_delay: float = 0.4  # seconds

    # Webhook
    webhook_host: str = "0.0.0.0"
    webhook_port: int = 8080
    webhook_path: str = "/webhook"
    webhook_secret: str = ""  # Optional: shared secret header check
    webhook_max_body_bytes: int = 1 << 20
    webhook_shutdown_timeout: float = 5.0

    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
