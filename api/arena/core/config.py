"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "Arena"
    debug: bool = True
    secret_key: str = "dev-secret-change-in-production"
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://arena:arena@db:5432/arena"
    database_echo: bool = False
    create_tables_on_startup: bool = False

    # Redis (Celery broker)
    redis_url: str = "redis://redis:6379/0"

    # Auth
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 30
    jwt_algorithm: str = "HS256"

    # Email / SMTP
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_from: str = "noreply@arena.local"
    frontend_url: str = "http://localhost:5173"

    # Facility
    facility_timezone: str = "UTC"
    slot_open_hour: int = 9  # first grid slot starts 09:00
    slot_close_hour: int = 21  # last grid slot ends 21:00

    # Waitlist sweep
    waitlist_sweep_minutes: int = 15

    model_config = {"env_prefix": "ARENA_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
