from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./pakproperty.db"
    REDIS_URL: Optional[str] = None
    JWT_SECRET: str = "change-this-secret-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 30
    MEDIA_ROOT: str = "media"
    MEDIA_URL: str = "/media"
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    SUPABASE_BUCKET: str = "properties"
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024
    MAX_IMAGES: int = 10
    FEATURED_LIMIT: int = 6
    FEATURED_CACHE_SECONDS: int = 600
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    AUTO_CREATE_TABLES: bool = True

    class Config:
        env_file = ".env"

settings = Settings()
