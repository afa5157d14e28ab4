"""Configuration and environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from exgrip/)
load_dotenv(Path(__file__).parent.parent / ".env")

# --- AWS ---
AWS_REGION = os.getenv("AWS_REGION", "us-east-2")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID", "")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY", "")
AWS_DB_TABLE_NAME = os.getenv("AWS_DB_TABLE_NAME", "exgrip-combinations")
AWS_BUCKET_NAME = os.getenv("AWS_BUCKET_NAME", "")

# --- Artifacts ---
ARTIFACT_URL_EXPIRY_SECONDS = int(os.getenv("ARTIFACT_URL_EXPIRY_SECONDS", "3600"))
ARTIFACT_MAX_CONCURRENCY = int(os.getenv("ARTIFACT_MAX_CONCURRENCY", "8"))

# --- Scan retry ---
SCAN_MAX_ATTEMPTS = int(os.getenv("SCAN_MAX_ATTEMPTS", "5"))
SCAN_BASE_DELAY_SECONDS = float(os.getenv("SCAN_BASE_DELAY_SECONDS", "0.1"))

# Applies to every record store and object store call
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

# --- Shopify (product handle lookup) ---
SHOPIFY_SHOP = os.getenv("SHOPIFY_SHOP", "")
SHOPIFY_ACCESS_TOKEN = os.getenv("SHOPIFY_ACCESS_TOKEN", "")
SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2024-07")

# --- Feature Flags ---
ENABLE_PRODUCT_LOOKUP = os.getenv("ENABLE_PRODUCT_LOOKUP", "false").lower() == "true"
