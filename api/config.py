"""
config.py – environment-driven settings.
Read once at import time; `.env` in the working directory is honoured.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# ── Database ──────────────────────────────────────────────────────────────────

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/catalog.db")

# ── Search ────────────────────────────────────────────────────────────────────

# Default market location (Byron Bay) used when the caller sends no coordinate
DEFAULT_LATITUDE  = float(os.getenv("DEFAULT_LATITUDE", "-28.6434"))
DEFAULT_LONGITUDE = float(os.getenv("DEFAULT_LONGITUDE", "153.6148"))

# ── Square POS ────────────────────────────────────────────────────────────────

SQUARE_ACCESS_TOKEN           = os.getenv("SQUARE_ACCESS_TOKEN", "")
SQUARE_ENVIRONMENT            = os.getenv("SQUARE_ENVIRONMENT", "sandbox").lower()
SQUARE_API_VERSION            = os.getenv("SQUARE_API_VERSION", "2024-01-18")
SQUARE_WEBHOOK_SIGNATURE_KEY  = os.getenv("SQUARE_WEBHOOK_SIGNATURE_KEY", "")
SQUARE_WEBHOOK_URL            = os.getenv("SQUARE_WEBHOOK_URL", "")

# ── HTTP / logging ────────────────────────────────────────────────────────────

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()] or ["*"]
LOG_LEVEL    = os.getenv("LOG_LEVEL", "INFO").upper()
