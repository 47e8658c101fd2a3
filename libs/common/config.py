from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    ADMIN_EMAIL: str = "admin@pdsstaffing.com"
    FRONTEND_URL: str = "http://localhost:3000"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./pds_local.db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Supabase
    # Placeholder defaults keep local/test runs working without credentials.
    SUPABASE_URL: str = "http://localhost"
    SUPABASE_ANON_KEY: str = "test-anon-key"
    SUPABASE_SERVICE_ROLE_KEY: str = "test-service-role-key"
    SUPABASE_JWT_SECRET: str = "test-jwt-secret"
    SUPABASE_PROJECT_ID: str = "test-project-id"
    I9_DOCUMENTS_BUCKET: str = "i9-documents"

    # Field-level encryption (must be at least 32 characters)
    ENCRYPTION_KEY: str = ""

    # MFA
    TOTP_ISSUER: str = "PDS Time Tracking"
    TOTP_WINDOW: int = 1
    MFA_LOGIN_CODE_TTL_MINUTES: int = 10

    # Login protection
    ACCOUNT_LOCK_MINUTES: int = 15
    TEMPORARY_PASSWORD_TTL_DAYS: int = 7

    # Rate limiting (slowapi storage)
    REDIS_URL: str = "memory://"

    # Email (Brevo SMTP)
    BREVO_KEY: str = ""
    SMTP_HOST: str = "smtp-relay.brevo.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    DEFAULT_FROM_EMAIL: str = "no-reply@pdsstaffing.com"
    DEFAULT_FROM_NAME: str = "PDS Staffing"
    # Comma-separated list of HR inboxes notified of sick leave requests
    SICK_LEAVE_REQUEST_RECIPIENTS: str = ""

    # Payroll
    DEFAULT_BASE_RATE: float = 17.28

    # Gateway
    GATEWAY_URL: str = "http://localhost:8000"

    # Microservices URLs
    IDENTITY_SERVICE_URL: str = "http://identity-service:8001"
    ONBOARDING_SERVICE_URL: str = "http://onboarding-service:8002"
    EVENTS_SERVICE_URL: str = "http://events-service:8003"
    ATTENDANCE_SERVICE_URL: str = "http://attendance-service:8004"
    PAYROLL_SERVICE_URL: str = "http://payroll-service:8005"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def sick_leave_recipients(self) -> list[str]:
        raw = self.SICK_LEAVE_REQUEST_RECIPIENTS or self.ADMIN_EMAIL
        return [email.strip() for email in raw.split(",") if email.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
