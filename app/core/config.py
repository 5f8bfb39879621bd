"""
Application Configuration
Settings are loaded from environment variables and .env
"""

from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache
from pydantic import Field


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = Field("Dutch Thrift API", alias="APP_NAME")
    app_version: str = Field("1.0.0", alias="APP_VERSION")
    debug: bool = Field(False, alias="DEBUG")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8000, alias="PORT")

    # Database
    database_url: str = Field("sqlite:///./dutch_thrift.db", alias="DATABASE_URL")

    # Auth
    jwt_secret: str = Field("dutch-thrift-secret-key", alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Bootstrap admin (created on startup when both are set)
    admin_email: Optional[str] = Field(None, alias="ADMIN_EMAIL")
    admin_password: Optional[str] = Field(None, alias="ADMIN_PASSWORD")

    # Sendcloud shipping labels
    sendcloud_api_url: str = Field("https://panel.sendcloud.sc/api/v2", alias="SENDCLOUD_API_URL")
    sendcloud_api_key: Optional[str] = Field(None, alias="SENDCLOUD_API_KEY")
    sendcloud_api_secret: Optional[str] = Field(None, alias="SENDCLOUD_API_SECRET")

    # CORS
    allowed_origins: str = Field(
        "http://localhost:5173,http://localhost:3000",
        alias="ALLOWED_ORIGINS",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = ""

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Settings singleton"""
    return Settings()
