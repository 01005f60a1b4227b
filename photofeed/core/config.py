"""
Core configuration settings for the Photo Feed API
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # App Config
    APP_NAME: str = "PhotoFeed"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./photofeed.db"

    # JWT
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # Password hashing
    BCRYPT_ROUNDS: int = 10

    # CORS
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS_ORIGINS string to list"""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # File Upload
    UPLOAD_DIR: str = "uploads"
    POST_IMAGE_MAX_BYTES: int = 5 * 1024 * 1024  # 5MB
    PROFILE_IMAGE_MAX_BYTES: int = 2 * 1024 * 1024  # 2MB
    ALLOWED_IMAGE_TYPES: str = "image/jpeg,image/png,image/webp"

    @property
    def allowed_image_types_list(self) -> List[str]:
        return [content_type.strip() for content_type in self.ALLOWED_IMAGE_TYPES.split(",")]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    COMMENTS_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100

    # Rate limiting (fixed window, per client IP)
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 900

    # Proxies whose X-Forwarded-For is trusted (comma separated, "*" for any)
    FORWARDED_ALLOW_IPS: str = "127.0.0.1"

    @property
    def forwarded_allow_ips_list(self) -> List[str]:
        return [host.strip() for host in self.FORWARDED_ALLOW_IPS.split(",") if host.strip()]

    # Logging
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_DATABASE: bool = True

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Create global settings instance
settings = Settings()
