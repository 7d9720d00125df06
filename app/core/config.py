from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    PROJECT_NAME: str = "DairyFlow API"
    DATABASE_URL: str = "sqlite:///./data/dairyflow.db"

    # Auth
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Domain
    LOW_STOCK_THRESHOLD: int = 20
    DATA_RETENTION_MONTHS: int = 12
    TIMEZONE: str = "Asia/Kolkata"

    # Logging
    LOG_DIR: str = "./logs"
    LOG_TO_FILE: bool = False
    JSON_LOGS: bool = False

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]


settings = Settings()
