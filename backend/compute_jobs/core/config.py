"""
Application configuration
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Job Processing
    MAX_JOB_WORKERS: int = 10  # background pipelines running at once
    MAX_COMPUTE_WORKERS: int = 4  # per-element compute threads shared by all jobs
    SYNC_POLL_INTERVAL_SECONDS: float = 0.1

    # Configuration limits
    MAX_PATH_LENGTH: int = 255
    MAX_DELIMITER_LENGTH: int = 10
    DEFAULT_DELIMITER: str = ","

    # Compute
    MAX_FACTORIAL_INPUT: int = 1000
    USE_CACHED_ENGINE: bool = True

    # Storage
    INPUT_FILE_SUFFIX: str = ".txt"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
