"""
Configuration module for the Disaster Alert service
Loads environment variables and provides settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_ENV: str = "development"
    APP_DEBUG: bool = False
    PORT: int = 3001

    # Comma-separated list of allowed origins
    CORS_ORIGINS: str = (
        "http://localhost:8080,http://localhost:8081,"
        "http://localhost:3000,http://localhost:5173"
    )

    # Record storage: "memory" or "sheets"
    STORAGE_BACKEND: str = "memory"

    # Google Sheets (service account)
    GOOGLE_SHEET_ID: str = ""
    GOOGLE_SERVICE_ACCOUNT_EMAIL: str = ""
    GOOGLE_PRIVATE_KEY: str = ""
    GOOGLE_CREDENTIALS_FILE: str = ""
    USERS_WORKSHEET: str = "Users Info"
    SOS_WORKSHEET: str = "SOS Alert"

    # Google Places (New) text search
    GOOGLE_MAPS_API_KEY: str = ""
    PLACES_API_URL: str = "https://places.googleapis.com/v1/places:searchText"
    PLACES_TIMEOUT_SEC: float = 10.0
    PLACES_DEFAULT_RADIUS: float = 5000.0
    PLACES_MAX_RESULTS: int = 20

    # Optional Redis cache for places results (empty disables caching)
    REDIS_URL: str = ""
    PLACES_CACHE_TTL_SEC: int = 300
    REDIS_TIMEOUT_SEC: float = 1.0
    REDIS_RETRY_COOLDOWN_SEC: float = 30.0

    # Emergency assistant LLM (empty key = keyword guidance only)
    GEMINI_API_KEY: str = ""
    GEMINI_API_URL: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"
    )
    ASSISTANT_TIMEOUT_SEC: float = 20.0

    # Client toolkit
    API_BASE_URL: str = "http://localhost:3001"
    ALERT_POLL_INTERVAL_SEC: float = 30.0
    # Local profile copy (empty disables) and sample zones/notifications on start
    CLIENT_PROFILE_PATH: str = ""
    CLIENT_DEMO_DATA: bool = False

    class Config:
        env_file = ".env"
        extra = "allow"

    @property
    def IS_PRODUCTION(self) -> bool:
        return self.APP_ENV.lower() == "production"

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
