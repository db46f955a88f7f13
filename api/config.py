"""
Environment-aware configuration.

Values are read from the environment (and .env) once, when the config class is
imported. create_app() turns the auth-related keys into an AuthSettings value
and hands it to the services that need it; nothing reads secrets from the
environment at request time.
"""
import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

from utils.time_utils import parse_expiry

load_dotenv()  # Read .env if present


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///token-auth.db")
    SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

    # jwt configurations; access and refresh tokens use separate secrets
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-access-secret-change-me-0123456789abcdef")
    JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "15m")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret-change-me-0123456789abcdef")
    JWT_REFRESH_EXPIRES_IN = os.getenv("JWT_REFRESH_EXPIRES_IN", "7d")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "token-auth-api")

    # argon2-cffi defaults unless overridden
    ARGON2_TIME_COST = int(os.getenv("ARGON2_TIME_COST", "3"))
    ARGON2_MEMORY_COST = int(os.getenv("ARGON2_MEMORY_COST", "65536"))
    ARGON2_PARALLELISM = int(os.getenv("ARGON2_PARALLELISM", "4"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    APP_ENV = "dev"


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    DATABASE_URL = "sqlite://"
    SQL_ECHO = False
    JWT_SECRET = "test-access-secret-0123456789abcdef0123456789"
    JWT_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef0123456789"
    # cheap hashing keeps the suite fast
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 8
    ARGON2_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    DEBUG = False
    APP_ENV = "prod"


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


def is_production(config) -> bool:
    return str(config.get("APP_ENV", "")).lower() in ("prod", "production")


@dataclass(frozen=True)
class AuthSettings:
    access_secret: str
    refresh_secret: str
    access_ttl: timedelta
    refresh_ttl: timedelta
    algorithm: str
    issuer: str | None
    argon2_time_cost: int
    argon2_memory_cost: int
    argon2_parallelism: int

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        """Build from a Flask config mapping; raises ValueError on bad values."""
        if is_production(config):
            for key in ("JWT_SECRET", "JWT_REFRESH_SECRET"):
                if config[key].startswith("dev-"):
                    raise ValueError(f"{key} must be set in production")
        return cls(
            access_secret=config["JWT_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            access_ttl=parse_expiry(config["JWT_EXPIRES_IN"]),
            refresh_ttl=parse_expiry(config["JWT_REFRESH_EXPIRES_IN"]),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER") or None,
            argon2_time_cost=int(config.get("ARGON2_TIME_COST", 3)),
            argon2_memory_cost=int(config.get("ARGON2_MEMORY_COST", 65536)),
            argon2_parallelism=int(config.get("ARGON2_PARALLELISM", 4)),
        )
