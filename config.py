"""
Runtime configuration

Values are read from the environment once, at import time.
"""
import os
from datetime import timedelta

# Database
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "ecommerce")

# Security/JWT
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALG = "HS256"
TOKEN_TTL = timedelta(days=7)
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Cookies
COOKIE_NAME = "auth_token"
CART_COOKIE_NAME = "cart_id"
COOKIE_SECURE = os.getenv("ENV", "development") == "production"

# Orders: "permissive" lets admins move between any admin statuses,
# "forward_only" only along FORWARD_TRANSITIONS in orders.py
ORDER_STATUS_POLICY = os.getenv("ORDER_STATUS_POLICY", "permissive")

SITE_URL = os.getenv("SITE_URL", "http://localhost:3000").rstrip("/")

# Bootstrap admin account, created at startup when both are set
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

# Development aid: echo generated temporary passwords back to the caller
EXPOSE_TEMP_PASSWORDS = os.getenv("EXPOSE_TEMP_PASSWORDS", "true").lower() in ("1", "true", "yes")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
