"""
Environment-aware configuration.
Values come from the process environment (and .env via python-dotenv);
durations are exposed as timedeltas so callers never juggle units.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _seconds(name: str, default: int) -> timedelta:
    return timedelta(seconds=int(os.getenv(name, str(default))))


def _to_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///auth-gateway.db")
    SQLALCHEMY_ECHO = _to_bool(os.getenv("SQLALCHEMY_ECHO"), False)

    # JWT: access and refresh tokens are signed with different keys
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "auth-gateway")
    ACCESS_TOKEN_EXPIRES = _seconds("ACCESS_TOKEN_EXPIRES_SECONDS", 3600)
    REFRESH_TOKEN_EXPIRES = _seconds("REFRESH_TOKEN_EXPIRES_SECONDS", 7 * 24 * 3600)

    # Second factor
    MFA_CODE_TTL = _seconds("MFA_CODE_TTL_SECONDS", 600)

    # Per-user lockout: failed password checks inside a trailing window
    LOCKOUT_THRESHOLD = int(os.getenv("LOCKOUT_THRESHOLD", "5"))
    LOCKOUT_WINDOW = _seconds("LOCKOUT_WINDOW_SECONDS", 30 * 60)

    # Per-client request quota on /login
    LOGIN_RATE_LIMIT = int(os.getenv("LOGIN_RATE_LIMIT", "5"))
    LOGIN_RATE_WINDOW = _seconds("LOGIN_RATE_WINDOW_SECONDS", 15 * 60)
    # Number of reverse proxies whose X-Forwarded-For we trust (0 = use the socket peer)
    TRUST_PROXY_HOPS = int(os.getenv("TRUST_PROXY_HOPS", "0"))

    PASSWORD_RESET_TTL = _seconds("PASSWORD_RESET_TTL_SECONDS", 3600)
    PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # Outbound email; with no SMTP_HOST, DEBUG/TESTING apps log instead of sending and others fail the send
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_USE_TLS = _to_bool(os.getenv("SMTP_USE_TLS"), True)
    MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@example.com")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
    JWT_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    SMTP_HOST = None


class ProductionConfig(BaseConfig):
    DEBUG = False
    SECRET_KEY = os.getenv("SECRET_KEY")


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
