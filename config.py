import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as paygo.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "paygo.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bound every database round trip; the core applies no timeout of its own
    DB_TIMEOUT_SECONDS = int(os.getenv("DB_TIMEOUT_SECONDS", "10"))
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "connect_args": {"timeout": DB_TIMEOUT_SECONDS}
        if SQLALCHEMY_DATABASE_URI.startswith("sqlite") else {"connect_timeout": DB_TIMEOUT_SECONDS},
    }

    # Header set by the upstream authenticator with the caller's external id
    AUTH_UID_HEADER = os.getenv("AUTH_UID_HEADER", "X-Auth-Uid")

    # All session instants are wall-clock times in this zone
    TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")

    # Cancellation policy: strictly more than this many minutes before start
    CANCEL_CUTOFF_MINUTES = 60

    # QR scan window around the session start (both ends inclusive)
    CHECKIN_OPENS_MINUTES_BEFORE = 60
    CHECKIN_CLOSES_MINUTES_AFTER = 30

    # "payload" = device camera submits the decoded string, "simulated" = manual scanner
    QR_SCANNER = os.getenv("QR_SCANNER", "payload")

    # Wallet recharge notifications
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")

    WALLET_TRANSACTIONS_LIMIT = 50

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
