import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    logger.warning("⚠️ DATABASE_URL not set, falling back to local SQLite database")
    DATABASE_URL = "sqlite:///./vetgroom.db"

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# OpenAI Configuration (AI inventory import)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "60"))

# Frontend base URL
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Comma separated list of CORS origins
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    f"{FRONTEND_URL},http://localhost:3000",
).split(",")

# Scheduling defaults (per tenant values override these)
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "Mexico/General")
DEFAULT_RESERVATION_TIMEOUT_MINUTES = int(os.getenv("DEFAULT_RESERVATION_TIMEOUT_MINUTES", "5"))
DEFAULT_CONCURRENT_CAPACITY = int(os.getenv("DEFAULT_CONCURRENT_CAPACITY", "1"))

# Feature toggles - only disable in development/testing
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() == "true"
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

APP_VERSION = "1.0.0"

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
