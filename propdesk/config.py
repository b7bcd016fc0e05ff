import os


def _env_int(name, default):
    return int(os.environ.get(name, default))


def _env_bool(name, default="False"):
    return os.environ.get(name, default).lower() in {"1", "true", "yes", "on"}


class Config:
    # Secret key for sessions / JWT
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_TOKEN_HOURS = _env_int("JWT_ACCESS_TOKEN_HOURS", 8)

    # Database connection
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///propdesk.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    API_PREFIX = "/api"
    JSON_SORT_KEYS = False

    # Where the signup links point to
    FRONTEND_BASE_URL = os.environ.get("FRONTEND_BASE_URL", "http://localhost:3000")
    CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "")

    # Invites
    INVITE_TTL_DAYS = _env_int("INVITE_TTL_DAYS", 7)
    INVITE_CODE_LENGTH = _env_int("INVITE_CODE_LENGTH", 10)
    MIN_PASSWORD_LENGTH = _env_int("MIN_PASSWORD_LENGTH", 6)

    # Server-sent events keepalive
    LIVE_HEARTBEAT_SECONDS = _env_int("LIVE_HEARTBEAT_SECONDS", 15)

    # Mail
    MAIL_SERVER = os.environ.get("MAIL_SERVER", "localhost")
    MAIL_PORT = _env_int("MAIL_PORT", 25)
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS")
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER", "no-reply@propdesk.local")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    FRONTEND_BASE_URL = "http://testserver"
    MAIL_SUPPRESS_SEND = True
    LIVE_HEARTBEAT_SECONDS = 1


class ProductionConfig(Config):
    @staticmethod
    def validate():
        # both are REQUIRED in production
        if not os.environ.get("SECRET_KEY"):
            raise ValueError("SECRET_KEY environment variable must be set")
        if not os.environ.get("DATABASE_URL"):
            raise ValueError("DATABASE_URL environment variable must be set")
