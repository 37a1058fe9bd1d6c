"""
Shared configuration for the Social Serve backend.
Loads .env once and exposes settings as module-level constants.
"""

import os
from dotenv import load_dotenv

# Load .env only once here
load_dotenv()

# --- DATABASE ---
DATABASE_URL = os.getenv("DATABASE_URL")

# --- AUTH ---
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET is missing. Set it in .env")

TOKEN_EXPIRATION_DAYS = int(os.getenv("TOKEN_EXPIRATION_DAYS", 7))
PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", 6))

# --- GATEWAY ---
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
GATEWAY_PORT = int(os.getenv("GATEWAY_PORT", 8000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- LISTING ---
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", 10))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", 100))
