"""
Application configuration — loaded once at startup.
"""

import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./comicstore.db")
SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key-change-me")
TOKEN_ALGORITHM = "HS256"
TOKEN_EXPIRY_MINUTES = int(os.getenv("TOKEN_EXPIRY_MINUTES", "60"))

PAYMENT_GATEWAY_URL = os.getenv("PAYMENT_GW", "https://pay.example.com/api/v1")
PAYMENT_API_KEY = os.getenv("PAYMENT_KEY", "pk_test_dummy")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "VND")
PAYMENT_TIMEOUT = float(os.getenv("PAYMENT_TIMEOUT", "15"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "3001"))
DEBUG = os.getenv("DEBUG", "0") == "1"
