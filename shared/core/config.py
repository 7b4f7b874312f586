import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str | None = os.getenv("DB_HOST")
    DB_PORT: str | None = os.getenv("DB_PORT")
    DB_NAME: str | None = os.getenv("DB_NAME")
    DB_SSLMODE: str = os.getenv("DB_SSLMODE", "require")

    # full override, e.g. sqlite:// for local runs and tests
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")

    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", 2))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", 2))

    # attempts before a contract number collision surfaces as a conflict
    CONTRACT_NUMBER_MAX_RETRIES: int = int(
        os.getenv("CONTRACT_NUMBER_MAX_RETRIES", 5))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:8080")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()

LEASE_DATABASE_URL = settings.DATABASE_URL or (
    f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}?sslmode={settings.DB_SSLMODE}"
)
