"""Application configuration"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./dj_sessions.db"

    # API Configuration
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    user_id_header: str = "X-User-Id"  # Set by the auth gateway in front of this service

    # Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # Session listings
    active_sessions_limit: int = 20
    ended_sessions_limit: int = 10
    max_list_limit: int = 100

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]


# Global settings instance
settings = Settings()
