from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from urllib.parse import urlparse


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Session cookies
    auth_cookie_name: Optional[str] = None  # Defaults to sb-<project-ref>-auth-token
    cookie_secure: Optional[bool] = None  # Defaults to True in production
    session_cookie_max_age: int = 400 * 24 * 60 * 60

    # App
    app_name: str = "rowkeeper"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"  # slowapi format, applied to sign-in/sign-up posts

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_auth_cookie_name(self) -> str:
        if self.auth_cookie_name:
            return self.auth_cookie_name
        host = urlparse(self.supabase_url).hostname or ""
        project_ref = host.split(".")[0] or "local"
        return f"sb-{project_ref}-auth-token"

    def get_cookie_secure(self) -> bool:
        if self.cookie_secure is None:
            return self.is_production
        return self.cookie_secure

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
