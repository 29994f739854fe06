# pyden_site/core/config.py
from __future__ import annotations
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # DB
    database_url: str = Field("sqlite+aiosqlite:///./data/app.sqlite3", alias="DATABASE_URL")

    # Public URLs / QR images
    base_url: str = Field("http://localhost:4000", alias="BASE_URL")
    qr_image_dir: str = Field("./data/qrcodes", alias="QR_IMAGE_DIR")
    qr_image_route: str = Field("/img/qrcodes", alias="QR_IMAGE_ROUTE")
    qr_image_width: int = Field(default=600, alias="QR_IMAGE_WIDTH")
    qr_border: int = Field(default=2, alias="QR_BORDER")

    # Admin sessions
    session_cookie_name: str = Field("pyden_session", alias="SESSION_COOKIE_NAME")
    session_ttl_hours: int = Field(default=8, alias="SESSION_TTL_HOURS")
    cookie_secure: bool = Field(default=False, alias="COOKIE_SECURE")

    # Initial operator (seeded on startup when both are set)
    admin_email: str | None = Field(default=None, alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")

    # Outbound mail (contact form)
    email_host: str = Field("localhost", alias="EMAIL_HOST")
    email_port: int = Field(default=587, alias="EMAIL_PORT")
    email_user: str = Field("", alias="EMAIL_USER")
    email_pass: str = Field("", alias="EMAIL_PASS")
    email_timeout_seconds: float = Field(default=15.0, alias="EMAIL_TIMEOUT_SECONDS")

    # Redis
    redis_url: str = Field("redis://127.0.0.1:6379/0", alias="REDIS_URL")
    redis_timeout_seconds: float = Field(default=0.5, alias="REDIS_TIMEOUT_SECONDS")
    rl_enabled: bool = Field(default=True, alias="RL_ENABLED")
    rl_window_seconds: int = Field(default=15 * 60, alias="RL_WINDOW_SECONDS")
    rl_auth_max_reqs: int = Field(default=50, alias="RL_AUTH_MAX_REQS")
    rl_api_max_reqs: int = Field(default=300, alias="RL_API_MAX_REQS")

    cors_origins: str = Field(
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
        alias="CORS_ORIGINS",
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(default=4000, alias="PORT")

    class Config:
        env_file = ".env"
        env_prefix = ""
        case_sensitive = False

    @property
    def public_base_url(self) -> str:
        return self.base_url.rstrip("/")

    @property
    def qr_image_path(self) -> Path:
        return Path(self.qr_image_dir)

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
