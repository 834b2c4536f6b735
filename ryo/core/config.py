# Defines application-wide settings using pydantic-settings' BaseSettings
# Manages environment variables for various aspects of the application:
# API configuration (version, project name)
# Session token and cookie settings
# Google sign-in audience/issuers
# Database connection details
# Cloudflare R2 object storage and upload limits
# Request timeout and compression


import json
from typing import Annotated, List, Union

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

load_dotenv()

MB = 1024 * 1024


def _split_list(v: Union[str, List[str]]) -> List[str]:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, str):
        # Handle JSON string format
        try:
            return json.loads(v)
        except ValueError:
            return []
    return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "ryo API"
    VERSION: str = "0.1.0"

    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Session token
    SECRET_KEY: str = "development_secret_key"
    ALGORITHM: str = "HS256"
    SESSION_TTL_HOURS: int = 9
    SESSION_COOKIE_NAME: str = "ryo_session"
    COOKIE_DOMAIN: str = "ryo.cat"
    TOKEN_AUDIENCE: str = "ryo.cat"
    TOKEN_ISSUER: str = "https://api.ryo.cat"

    # Google sign-in
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_ISSUERS: Annotated[List[str], NoDecode] = [
        "accounts.google.com",
        "https://accounts.google.com",
    ]

    # Database
    DATABASE_URL: str = "sqlite:///./ryo.db"

    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:5173"]

    # Cloudflare R2 Storage
    R2_ACCOUNT_ID: str = ""
    R2_ENDPOINT: str = ""
    R2_ACCESS_KEY_ID: str = ""
    R2_SECRET_ACCESS_KEY: str = ""
    R2_BUCKET_NAME: str = "ryo-media"
    PUBLIC_MEDIA_URL: str = "https://cdn.ryo.cat"

    # Upload limits (bytes) and presigned URL lifetimes (seconds)
    MAX_PROFILE_PICTURE_SIZE: int = 10 * MB
    MAX_POST_MEDIA_SIZE: int = 50 * MB
    MAX_UPLOAD_SIZE: int = 10 * MB
    MEDIA_URL_EXPIRATION: int = 24 * 3600
    PRESIGNED_URL_EXPIRATION: int = 3600

    # Ceiling on a whole request (seconds) and response compression
    REQUEST_TIMEOUT: float = 60
    GZIP_MINIMUM_SIZE: int = 1000
    GZIP_LEVEL: int = 5

    @field_validator("BACKEND_CORS_ORIGINS", "GOOGLE_ISSUERS", mode="before")
    @classmethod
    def assemble_list(cls, v: Union[str, List[str]]) -> List[str]:
        return _split_list(v)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def r2_endpoint_url(self) -> str:
        if self.R2_ENDPOINT:
            return self.R2_ENDPOINT
        if self.R2_ACCOUNT_ID:
            return f"https://{self.R2_ACCOUNT_ID}.r2.cloudflarestorage.com"
        return ""


# Create settings instance
settings = Settings()
