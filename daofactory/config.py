import os

from dotenv import dotenv_values


class BaseConfig:
    # Secrets (env in prod; dev/test may use defaults)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-not-secure")
    WTF_CSRF_SECRET_KEY = SECRET_KEY

    # Database (env in prod; dev falls back to .env, then a local SQLite file)
    _ENV_FALLBACK = dotenv_values(".env")
    SQLALCHEMY_DATABASE_URI = (
        os.environ.get("DATABASE_URL")
        or _ENV_FALLBACK.get("DATABASE_URL")
        or "sqlite:///dao_factory.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging / misc
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    SENTRY_DSN = os.environ.get("SENTRY_DSN")
    SITE_NAME = os.getenv("SITE_NAME", "DAO Factory")

    # The UI and third-party agents call the API cross-origin
    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "*")

    # Cookies: secure-by-default
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Flask-Limiter: no global default; write endpoints carry RATELIMIT_WRITE
    RATELIMIT_DEFAULT = None
    RATELIMIT_WRITE = os.getenv("RATELIMIT_WRITE", "60 per minute")

    # --- Governance defaults ---
    DAO_DEFAULT_APPROVAL_THRESHOLD = int(os.getenv("DAO_DEFAULT_APPROVAL_THRESHOLD", "51"))
    DAO_LIST_DEFAULT_LIMIT = 50
    DAO_LIST_MAX_LIMIT = 200
    DAO_DETAIL_PROPOSAL_LIMIT = 20
    DAO_DETAIL_ACTIVITY_LIMIT = 30


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    SESSION_COOKIE_SECURE = False


class StagingConfig(BaseConfig):
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    # Presence is enforced in create_app(); no dev fallbacks here
    SECRET_KEY = os.environ.get("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")
    SESSION_COOKIE_SECURE = True


class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    SESSION_COOKIE_SECURE = False
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False


_ENV_MAP = {
    "development": DevelopmentConfig,
    "staging": StagingConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config():
    env = os.environ.get("APP_ENV", "development").lower()
    return _ENV_MAP.get(env, DevelopmentConfig)
