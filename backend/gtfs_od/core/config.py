"""Application configuration"""

from typing import List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings

    Configuration priority:
    1. Environment variables (.env file or system environment)
    2. Default values
    """

    # Application
    PROJECT_NAME: str = Field(default="GTFS OD Restriction API", description="API title")
    VERSION: str = Field(default="0.1.0", description="API version")
    ENVIRONMENT: str = Field(default="development", description="Environment name")
    DEBUG: bool = Field(default=True, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # CORS
    CORS_ORIGINS: Union[str, List[str]] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="CORS allowed origins",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_list_from_string(cls, v):
        """Parse comma-separated string into list"""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    # Overrides files
    MAX_UPLOAD_SIZE_MB: int = Field(default=10, description="Maximum overrides upload size in MB")
    OVERRIDES_SLUG: str = Field(
        default="",
        description="Feed slug used to pick a body out of a multi-feed overrides.json",
    )
    OVERRIDES_VERSION: int = Field(default=1, description="Version written into exported overrides")

    # Compiled export
    EXPORT_FILENAME: str = Field(
        default="gtfs_compiled_trips.zip",
        description="Download name for the compiled trips/stop_times fragment",
    )

    @property
    def max_upload_bytes(self) -> int:
        """Upload limit in bytes."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
