"""
Application configuration

Read once from the environment at import time.
"""

import os

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Pricing
SHIPPING_FEE = float(os.getenv("SHIPPING_FEE", "9.99"))
FREE_SHIPPING_THRESHOLD = float(os.getenv("FREE_SHIPPING_THRESHOLD", "100.0"))
MAX_QUANTITY = int(os.getenv("MAX_QUANTITY", "10"))

# Checkout
PAYMENT_DELAY_SECONDS = float(os.getenv("PAYMENT_DELAY_SECONDS", "1.5"))
DELIVERY_DAYS = int(os.getenv("DELIVERY_DAYS", "7"))

# Admin dashboard login (plaintext, demo only)
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")
