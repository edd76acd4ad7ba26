from pydantic_settings import BaseSettings
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    # App
    app_name: str = "RuzMovie API"
    environment: str = "development"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"
    host: str = "0.0.0.0"
    port: int = 8000

    # Security
    jwt_secret: str = "super-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire: str = "7d"  # seconds ("3600") or a duration ("7d", "12h", "30m")

    # CORS (comma-separated)
    backend_cors_origins: str = "*"

    # Database
    database_url: str = "sqlite:///./ruzmovie.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 60
    db_connect_timeout: int = 60
    db_connect_retries: int = 5
    db_ssl_required: bool = False
    db_ssl_ca: Optional[str] = None
    db_echo_sql: bool = False
    auto_create_tables: bool = True

    # Admin bootstrap
    bootstrap_on_startup: bool = True
    admin_email: str = "admin@movie.com"
    admin_username: str = "admin"
    admin_password: Optional[str] = None

    # Uploads
    max_upload_size_mb: int = 500
    placeholder_thumbnail_url: str = "https://via.placeholder.com/320x180.png?text=Video+Thumbnail"

    # Caches
    profile_cache_ttl_seconds: float = 300
    video_cache_ttl_seconds: float = 0  # 0 disables the video detail cache

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # json or console

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.backend_cors_origins.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
