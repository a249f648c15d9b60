"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Flat store
    DB_PATH: str = "db.json"
    STORE_TIMEOUT_SECONDS: float = 5.0
    
    # Application
    APP_NAME: str = "Quizzy API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173"]
    BASE_URL: str = "http://localhost:5173"
    
    # Email delivery
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    EMAIL_FROM: str = "Quizzy <noreply@quizzy.com>"
    
    # Rate Limiting (email endpoints)
    EMAIL_RATE_LIMIT_PER_MINUTE: int = 5
    EMAIL_RATE_LIMIT_PER_HOUR: int = 50
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
