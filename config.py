# fitmarket/config.py
import os

from dotenv import load_dotenv

# Load .env before anything reads the environment
load_dotenv()


class Config:
    # Database
    # SQLite file for local development; set DATABASE_URL to a postgresql:// URL in production.
    DATABASE_URL = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(os.path.abspath(__file__)), 'fitmarket.db')}"
    )
    DB_POOL_TIMEOUT = int(os.environ.get("DB_POOL_TIMEOUT", "30"))
    # Per-statement deadline for PostgreSQL connections (0 disables)
    DB_STATEMENT_TIMEOUT_MS = int(os.environ.get("DB_STATEMENT_TIMEOUT_MS", "10000"))

    # Auth
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev_secret_key_change_me")
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Stripe
    STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET")
    PAYMENT_CURRENCY = os.environ.get("PAYMENT_CURRENCY", "usd")

    # HTTP
    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
    PORT = int(os.environ.get("PORT", "8000"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
