"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Database (the helpdesk's Postgres, tenant isolation enforced there)
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Identity service (admin lookups need the service-role key)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUPABASE_JWT_SECRET: str = ""
    SUPABASE_JWT_AUDIENCE: str = "authenticated"

    # Transactional email (Resend)
    RESEND_API_KEY: str = ""
    NOTIFICATION_FROM_EMAIL: str = "noreply@resend.dev"
    DEFAULT_COMPANY_NAME: str = "Sistema de Tickets"

    # Deep links in emails
    FRONTEND_URL: str = "http://localhost:3000"
    NOTIFICATION_TIMEZONE: str = "America/Sao_Paulo"

    # CORS (comma-separated, "*" for any origin)
    CORS_ORIGINS: str = "*"

    # Database webhooks (X-Internal-Secret)
    INTERNAL_SECRET: str = ""

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def frontend_base_url(self) -> str:
        return self.FRONTEND_URL.rstrip("/")


settings = Settings()
