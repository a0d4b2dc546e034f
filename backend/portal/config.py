"""
Application settings (Pydantic Settings).
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env next to backend/ (parent of portal/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    database_url: str = "mysql+pymysql://root:@localhost:3306/portal"
    db_pool_size: int = 30
    db_pool_recycle_seconds: int = 600  # idle connections are recycled after 10 min
    db_retry_attempts: int = 3
    db_retry_backoff_seconds: float = 1.0

    # Cookie sessions (validated by portal.services.auth)
    session_cookie_name: str = "auth_session"
    session_ttl_days: int = 14
    session_extend_within_days: int = 7

    # Bearer token for the document-request API (server-to-server calls from the portal frontend)
    api_token: str = ""

    # Comma-separated extra origins for CORS (production frontend)
    cors_origins: str = ""

    # SMTP (best-effort email channel)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    notify_from: str = ""
    notify_admins_by_email: bool = False
    portal_base_url: str = "http://localhost:3000"

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("api_token", "smtp_user", "smtp_password", mode="after")
    @classmethod
    def strip_secrets(cls, v: str) -> str:
        return (v or "").strip()

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
