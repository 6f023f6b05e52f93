from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "OSCE Exams"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./osce.db"
    TEST_DATABASE_URL: Optional[str] = None
    DATABASE_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Scheduler
    SCHEDULER_ENABLED: bool = True
    EXAM_STATUS_JOB_HOUR: int = 0  # daily, local server time

    class Config:
        env_file = ".env"

settings = Settings()
