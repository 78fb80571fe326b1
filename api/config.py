"""
Environment-aware configuration.
Secrets and token lifetimes are read from the environment (.env supported).
AuthSettings is the immutable view the token issuer and cookie helpers use;
it is built once per application in create_app().
"""
import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()  # Read .env if present


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///user-accounts.db")
    SQL_ECHO = False
    # Access and refresh tokens are signed with distinct secrets
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "dev-access-secret-change-me")
    ACCESS_TOKEN_EXPIRY = timedelta(minutes=int(os.getenv("ACCESS_TOKEN_EXPIRY_MINUTES", "15")))
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "dev-refresh-secret-change-me")
    REFRESH_TOKEN_EXPIRY = timedelta(days=int(os.getenv("REFRESH_TOKEN_EXPIRY_DAYS", "10")))
    COOKIE_SECURE = True
    STARTING_COINS = int(os.getenv("STARTING_COINS", "500"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    APP_ENV = "dev"
    SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    DATABASE_URL = "sqlite:///:memory:"
    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"


class ProductionConfig(BaseConfig):
    DEBUG = False
    APP_ENV = "prod"


@dataclass(frozen=True)
class AuthSettings:
    access_token_secret: str
    access_token_expiry: timedelta
    refresh_token_secret: str
    refresh_token_expiry: timedelta
    algorithm: str = "HS256"
    cookie_secure: bool = True
    starting_coins: int = 500

    @classmethod
    def from_mapping(cls, config) -> "AuthSettings":
        """Build settings from a Flask config (or any mapping with the same keys)."""
        if config["ACCESS_TOKEN_SECRET"] == config["REFRESH_TOKEN_SECRET"]:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        return cls(
            access_token_secret=config["ACCESS_TOKEN_SECRET"],
            access_token_expiry=config["ACCESS_TOKEN_EXPIRY"],
            refresh_token_secret=config["REFRESH_TOKEN_SECRET"],
            refresh_token_expiry=config["REFRESH_TOKEN_EXPIRY"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            cookie_secure=config.get("COOKIE_SECURE", True),
            starting_coins=config.get("STARTING_COINS", 500),
        )


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
