'''
Holds all the configurations
'''
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Application Metadata
    APP_NAME: str = "Class Scheduler Backend"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Class scheduling and management API for online tutoring."
    TEST_MODE: bool = False

    # Database URL (async drivers: postgresql+asyncpg:// or sqlite+aiosqlite://)
    DATABASE_URL_PROD: str
    DATABASE_URL_TEST: str
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    # JWT Settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS
    BACKEND_CORS_ORIGINS: list[str] = []

    # Google Calendar / Meet
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_REFRESH_TOKEN: Optional[str] = None
    GOOGLE_CALENDAR_ID: str = "primary"
    MEETING_TIMEZONE: str = "UTC"

# Create a single, importable instance of the settings
settings = Settings()
