import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # Single operator: every admin endpoint checks this shared secret
    ADMIN_SECRET = os.getenv("ADMIN_SECRET")

    # Shared secret for the request-deleted database webhook
    WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET")

    # SQLite database file stored next to the app as livable.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "livable.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Public site, used to build reschedule links
    SITE_NAME = os.getenv("SITE_NAME", "Livable")
    APP_URL = os.getenv("APP_URL")
    APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Seoul")

    # Submit endpoint limits
    MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", "50000"))
    SUBMIT_RATE_WINDOW_SECONDS = int(os.getenv("SUBMIT_RATE_WINDOW_SECONDS", str(15 * 60)))
    SUBMIT_RATE_MAX_REQUESTS = int(os.getenv("SUBMIT_RATE_MAX_REQUESTS", "5"))

    # Zoom (Server-to-Server OAuth)
    ZOOM_ACCOUNT_ID = os.getenv("ZOOM_ACCOUNT_ID")
    ZOOM_CLIENT_ID = os.getenv("ZOOM_CLIENT_ID")
    ZOOM_CLIENT_SECRET = os.getenv("ZOOM_CLIENT_SECRET")
    ZOOM_USER_ID = os.getenv("ZOOM_USER_ID", "me")
    ZOOM_OAUTH_URL = os.getenv("ZOOM_OAUTH_URL", "https://zoom.us/oauth/token")
    ZOOM_API_BASE = os.getenv("ZOOM_API_BASE", "https://api.zoom.us/v2")

    # Discord channel webhook for new request / reschedule / meeting pings
    DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL")

    # Timeout for every outbound HTTP call
    HTTP_TIMEOUT_SECONDS = int(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_FROM_NAME = os.getenv("SMTP_FROM_NAME", "Livable")
    SMTP_REPLY_TO = os.getenv("SMTP_REPLY_TO")
    SMTP_USE_TLS = _env_bool("SMTP_USE_TLS", "true")

    # Emails and chat pings run off the request thread
    BACKGROUND_NOTIFICATIONS = _env_bool("BACKGROUND_NOTIFICATIONS", "true")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    ADMIN_SECRET = "test-admin-secret"
    WEBHOOK_SECRET = "test-webhook-secret"
    APP_URL = "https://livable.test"
    ZOOM_ACCOUNT_ID = "acct"
    ZOOM_CLIENT_ID = "client"
    ZOOM_CLIENT_SECRET = "secret"
    DISCORD_WEBHOOK_URL = None
    SMTP_HOST = None
    BACKGROUND_NOTIFICATIONS = False
