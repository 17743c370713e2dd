import os
from typing import List
from dotenv import load_dotenv

# grab env vars from the tenant's env file (ENV_FILE) or plain .env
load_dotenv(os.getenv("ENV_FILE", ".env"))


class Settings:
    # app settings
    APP_ENV: str = os.getenv("APP_ENV", "dev")
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.getenv("APP_PORT", "8000"))
    TENANT_NAME: str = os.getenv("TENANT_NAME", "default")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change_me_very_long")
    ACCESS_TOKEN_EXPIRES_MIN: int = int(os.getenv("ACCESS_TOKEN_EXPIRES_MIN", "1440"))

    # CORS stuff
    _origins_raw: str = os.getenv("ALLOWED_ORIGINS", "*")
    ALLOWED_ORIGINS: List[str] = [o.strip() for o in _origins_raw.split(",") if o.strip()] if _origins_raw else ["*"]

    # database config with separate creds
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
    DB_NAME: str = os.getenv("DB_NAME", "storefront")
    DB_USER: str = os.getenv("DB_USER", "storefront_user")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
    DB_SSL_MODE: str = os.getenv("DB_SSL_MODE", "prefer")
    DB_CONNECTION_TIMEOUT: int = int(os.getenv("DB_CONNECTION_TIMEOUT", "30"))
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))

    @property
    def DATABASE_URL(self) -> str:
        """build DATABASE_URL from individual components or use explicit override"""
        explicit_url = os.getenv("DATABASE_URL")
        if explicit_url:
            return explicit_url

        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}@"
            f"{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            f"?sslmode={self.DB_SSL_MODE}&connect_timeout={self.DB_CONNECTION_TIMEOUT}"
        )

    # email stuff via Resend
    RESEND_API_KEY: str | None = os.getenv("RESEND_API_KEY")
    FROM_EMAIL: str | None = os.getenv("FROM_EMAIL")
    FROM_NAME: str = os.getenv("FROM_NAME", "Storefront")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    EMAIL_LOCALE: str = os.getenv("EMAIL_LOCALE", "de")

    # admin notification emails (added to the admins stored in the db)
    ADMIN_EMAILS: List[str] = [e.strip() for e in os.getenv("ADMIN_EMAILS", "").split(",") if e.strip()]

    # uploads: single "current" magazine pdf per tenant, overwritten on upload
    UPLOAD_PATH: str = os.getenv("UPLOAD_PATH", "uploads")
    UPLOAD_SLOT_POLICY: str = os.getenv("UPLOAD_SLOT_POLICY", "single")

    # order hours
    ORDER_HOURS_TIMEZONE: str = os.getenv("ORDER_HOURS_TIMEZONE", "Europe/Berlin")

    # expiry check mail fan-out
    EXPIRY_MAIL_WORKERS: int = int(os.getenv("EXPIRY_MAIL_WORKERS", "4"))


settings = Settings()
