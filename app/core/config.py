from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"
    QUOTE_TTL: int = 86400  # 24 hours

    ROUTING_API_KEY: Optional[str] = None
    ROUTING_URL: str = "https://maps.googleapis.com/maps/api/directions/json"
    ROUTING_TIMEOUT: float = 3.0  # seconds
    ROUTING_RETRIES: int = 2

    MIN_ADDRESS_LENGTH: int = 3
    FALLBACK_DISTANCE_MILES: float = 20.0
    FALLBACK_MINUTES: int = 90

    API_TITLE: str = "Man and Van Quote Service"
    API_DESCRIPTION: str = "Quote calculation engine for local removals and man-and-van bookings"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
