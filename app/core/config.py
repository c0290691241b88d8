from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "ClinicScheduler"
    API_V1_STR: str = "/api/v1"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "clinic"
    DATABASE_URL: Optional[str] = None
    CREATE_TABLES_ON_STARTUP: bool = False

    REDIS_URL: str = "redis://localhost:6379/0"
    LOG_LEVEL: str = "INFO"

    # Clinic-wide working hours used for slot generation
    WORKING_HOURS_START: int = 9
    WORKING_HOURS_END: int = 20
    SLOT_GRANULARITY_MINUTES: int = 30

    BOOKING_LOCK_TIMEOUT_SECONDS: int = 10
    BOOKING_LOCK_WAIT_SECONDS: int = 5

    class Config:
        case_sensitive = True
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.DATABASE_URL:
            self.DATABASE_URL = f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"

settings = Settings()
