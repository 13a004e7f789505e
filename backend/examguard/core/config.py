import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    port: int = 8000
    environment: str = "development"

    postgres_user: str = os.getenv("POSTGRES_USER", "user")
    postgres_password: str = os.getenv("POSTGRES_PASSWORD", "password")
    postgres_db: str = os.getenv("POSTGRES_DB", "examguard_db")
    postgres_host: Optional[str] = os.getenv("POSTGRES_HOST")
    postgres_port: int = 5432
    sqlite_path: str = "./examguard.db"

    @property
    def database_url(self) -> str:
        if not self.postgres_host:
            return f"sqlite:///{self.sqlite_path}"
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    secret_key: str = "change-me-examguard-secret-key-32c"
    algorithm: str = "HS256"
    session_cookie_name: str = "examguard_session"
    session_expire_minutes: int = 240

    cors_origins_str: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins_str.split(",")]

    # escalation policy
    warn_threshold: int = 2
    end_threshold: int = 3
    max_event_type_length: int = 50
    max_details_length: int = 1000

    default_timezone: str = "UTC"
    timezone_display_format: str = "%d.%m.%Y, %H:%M:%S"

    results_url: str = "/result"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
