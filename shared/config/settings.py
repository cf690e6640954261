import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    # Fall back to the Postgres cluster settings when a host is configured
    host = os.getenv("POSTGRES_HOST")
    if host:
        user = os.getenv("POSTGRES_USER", "postgres")
        password = os.getenv("POSTGRES_PASSWORD", "postgres")
        port = os.getenv("POSTGRES_PORT", "5432")
        name = os.getenv("POSTGRES_DB", "ecommerce")
        return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"

    return "sqlite+aiosqlite:///./storefront.db"


DATABASE_URL = _database_url()
SQL_ECHO = _flag("SQL_ECHO", "false")

# Pricing
TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.08"))
FREE_SHIPPING_THRESHOLD = Decimal(os.getenv("FREE_SHIPPING_THRESHOLD", "100.00"))
FLAT_SHIPPING_FEE = Decimal(os.getenv("FLAT_SHIPPING_FEE", "9.99"))

# Payment simulator
DECLINE_CARD_NUMBER = os.getenv("DECLINE_CARD_NUMBER", "4000000000000002")

# Transaction retry for lock/serialization conflicts
TX_MAX_ATTEMPTS = int(os.getenv("TX_MAX_ATTEMPTS", "3"))
TX_BACKOFF_SECONDS = float(os.getenv("TX_BACKOFF_SECONDS", "0.05"))

# Rate limiting
RATE_LIMIT_ENABLED = _flag("RATE_LIMIT_ENABLED", "true")
CHECKOUT_RATE_LIMIT = os.getenv("CHECKOUT_RATE_LIMIT", "20/minute")

# Tracing exporter is only wired when an endpoint is configured
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
