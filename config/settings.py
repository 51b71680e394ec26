"""
DineFlow - Centralized Configuration
=====================================
All environment variables and constants are loaded here.
No other module should call os.getenv() directly.
"""

import os
import sys
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()


# ==========================================
# 🗄️ Database
# ==========================================
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    if all([DB_USER, DB_PASSWORD, DB_NAME]):
        DATABASE_URL = f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    else:
        # Local-only default. Production must provide DATABASE_URL or DB_* explicitly.
        DATABASE_URL = "sqlite:///./dineflow.db"


# ==========================================
# 🔐 Security
# ==========================================
SECRET_KEY = os.getenv("SECRET_KEY")

if not SECRET_KEY:
    print("[ERROR] Critical: SECRET_KEY missing in .env")
    sys.exit(1)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))  # 7 days


# ==========================================
# 💵 Pricing
# ==========================================
DELIVERY_FEE = Decimal(os.getenv("DELIVERY_FEE", "2.99"))
TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.10"))


# ==========================================
# 📦 Orders
# ==========================================
# "permissive": admins may skip forward along the happy path
# "sequential": only the next happy-path status is accepted
ORDER_TRANSITION_POLICY = os.getenv("ORDER_TRANSITION_POLICY", "permissive").strip().lower()
ESTIMATED_DELIVERY_MINUTES = int(os.getenv("ESTIMATED_DELIVERY_MINUTES", "30"))
# Off: only admins change order status. On: customers may also cancel their
# own order while it is pending or confirmed.
CUSTOMER_SELF_CANCEL = os.getenv("CUSTOMER_SELF_CANCEL", "false").lower() == "true"

DEFAULT_PAGE_SIZE = 10
CUSTOMER_MAX_PAGE_SIZE = 50
ADMIN_MAX_PAGE_SIZE = 100


# ==========================================
# 🛒 Cart
# ==========================================
# Directory for the JSON file-backed cart store (client-local carts)
CART_STORE_DIR = os.getenv("CART_STORE_DIR", ".local/carts")


# ==========================================
# 🔧 App
# ==========================================
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
