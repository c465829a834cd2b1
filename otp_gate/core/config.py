from pydantic_settings import BaseSettings
from typing import List, Optional, Union
from pydantic import field_validator
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "OTP Gate API"

    # Redis Settings (OTP state store)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_SOCKET_TIMEOUT: float = 5.0

    # "redis" in production, "memory" for local development without Redis
    OTP_STORE_BACKEND: str = "redis"

    # OTP lifetimes (seconds)
    OTP_TTL_SECONDS: int = 300
    OTP_COOLDOWN_SECONDS: int = 60
    OTP_REQUEST_WINDOW_SECONDS: int = 3600
    OTP_SPAM_LOCK_SECONDS: int = 3600
    OTP_ACCOUNT_LOCK_SECONDS: int = 1800
    OTP_ATTEMPTS_WINDOW_SECONDS: int = 3600

    # OTP thresholds
    OTP_MAX_REQUESTS: int = 2
    OTP_MAX_FAILED_ATTEMPTS: int = 3

    # AWS SES Settings (OTP mail delivery)
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_SES_FROM_EMAIL: str = "no-reply@example.com"
    AWS_SES_FROM_NAME: str = "OTP Gate"
    APP_NAME: str = "OTP Gate"

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # CORS Settings - can be set as JSON string in .env
    BACKEND_CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[List[str], str]) -> List[str]:
        """Parse CORS origins from JSON string or list"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, split by comma
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("OTP_STORE_BACKEND")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Only the redis and in-memory backends exist"""
        v = v.lower()
        if v not in ("redis", "memory"):
            raise ValueError("OTP_STORE_BACKEND must be 'redis' or 'memory'")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
