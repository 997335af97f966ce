from pydantic_settings import BaseSettings
from typing import List, Optional
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Gnet E-commerce Auth Service"
    APP_ENV: str = "development"
    DEBUG: bool = True
    ENABLE_API_DOCS: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str

    # Redis (rate limiter storage)
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_STORAGE_URI: Optional[str] = None
    RATE_LIMIT_ENABLED: bool = True

    @property
    def rate_limit_storage(self) -> str:
        return self.RATE_LIMIT_STORAGE_URI or self.REDIS_URL

    # JWT
    JWT_ACCESS_SECRET: str
    JWT_REFRESH_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # OTP
    OTP_EXPIRES_MIN: int = 10
    OTP_CLEANUP_INTERVAL: int = 300  # seconds

    # Email (Resend)
    RESEND_API_KEY: Optional[str] = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    FROM_EMAIL: str = "Gnet E-commerce <no-reply@gnet.local>"
    MAIL_TIMEOUT: int = 10
    COMPANY_NAME: str = "Gnet E-commerce"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

# Create settings instance
settings = Settings()

if settings.LOG_FILE:
    os.makedirs(os.path.dirname(settings.LOG_FILE) or ".", exist_ok=True)
