from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: str = Field(..., alias="SUPABASE_SERVICE_ROLE_KEY")
    # When set, bearer tokens are verified locally instead of calling the auth API
    supabase_jwt_secret: Optional[str] = Field(None, alias="SUPABASE_JWT_SECRET")
    supabase_jwt_audience: str = Field("authenticated", alias="SUPABASE_JWT_AUDIENCE")

    storage_bucket: str = Field("resources", alias="STORAGE_BUCKET")
    signed_url_expires_in: int = Field(300, alias="SIGNED_URL_EXPIRES_IN")
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    latest_resources_limit: int = Field(3, alias="LATEST_RESOURCES_LIMIT")

    cors_origins: List[str] = Field(["http://localhost:5173"], alias="CORS_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
