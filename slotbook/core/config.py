from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Slotbook Appointments"

    # Server
    PORT: int = 8000
    ENVIRONMENT: str = "development"

    # Storage: "supabase" or "memory"
    STORAGE_BACKEND: str = "supabase"
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # Security
    JWT_SECRET: str = "fallback_secret_for_dev_only_replace_me"
    JWT_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_MINUTES: int = 60 * 24
    SESSION_COOKIE_NAME: str = "sessionToken"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 7
    ALLOWED_EMAIL_DOMAINS: List[str] = ["gmail.com", "yahoo.com"]

    # Scheduling
    REFERENCE_TIMEZONE: str = "America/Chicago"

    # Logging
    LOG_LEVEL: str = "INFO"
    ERROR_LOG_FILE: str = "logs/errors.log"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
