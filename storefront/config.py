# storefront/config.py
from pydantic import model_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

DEFAULT_SECRET_KEY = "dev-secret-change-me"


class Settings(BaseSettings):
    # Either a full SQLAlchemy URL or the individual DB_* parts below
    DATABASE_URL: Optional[str] = None
    DB_DRIVER: str = "mysql+pymysql"
    DB_HOST: str = "localhost"
    DB_PORT: Optional[int] = None
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: Optional[str] = None
    DB_POOL_SIZE: int = 10

    # Session cookie signing
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "storefront_session"
    SESSION_MAX_AGE_MINUTES: int = 60 * 24

    # CSRF double-submit token
    CSRF_ENABLED: bool = True
    CSRF_COOKIE_NAME: str = "csrf_token"
    CSRF_HEADER_NAME: str = "X-CSRF-Token"

    FRONTEND_URL: str = "http://localhost:3000"
    ENVIRONMENT: str = "development"

    # Registrations from this e-mail domain get the admin flag
    ADMIN_EMAIL_DOMAIN: Optional[str] = None

    BCRYPT_ROUNDS: int = 12
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)

    @model_validator(mode="after")
    def _check_production_secret(self):
        if self.is_production and self.SECRET_KEY == DEFAULT_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # SQLAlchemy wants postgresql://, some hosts still hand out postgres://
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql://", 1)
            return url
        if self.DB_NAME:
            return URL.create(
                self.DB_DRIVER,
                username=self.DB_USER,
                password=self.DB_PASSWORD or None,
                host=self.DB_HOST,
                port=self.DB_PORT,
                database=self.DB_NAME,
            ).render_as_string(hide_password=False)
        return "sqlite:///./storefront.db"


settings = Settings()
