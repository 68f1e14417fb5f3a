"""
Configuration scope only. Do not implement beyond this file's responsibilities.
Environment-driven settings for the weight store, review tracker, audit trail and API.
"""

import os
from pathlib import Path

# Audit database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/review.db")

DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Audit trail of review commands (default disabled)
AUDIT_ENABLED = os.getenv("AUDIT_ENABLED", "false").lower() == "true"

# Tolerance for "weights sum to 1.0" and for treating a normalization denominator as zero
WEIGHT_SUM_TOLERANCE = float(os.getenv("WEIGHT_SUM_TOLERANCE", "1e-9"))

# API server configuration
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# Version string
VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "true").lower() == "true"


def is_audit_enabled():
    """Check if review commands are written to the audit trail."""
    return os.getenv("AUDIT_ENABLED", "false").lower() == "true"


def get_weight_tolerance():
    """Get the normalization tolerance."""
    return WEIGHT_SUM_TOLERANCE


def ensure_db_directory():
    """Ensure the database directory exists."""
    Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if not 0 < WEIGHT_SUM_TOLERANCE < 1e-3:
        issues.append(f"WEIGHT_SUM_TOLERANCE must be in (0, 1e-3), got {WEIGHT_SUM_TOLERANCE}")

    if not 0 < API_PORT < 65536:
        issues.append(f"Invalid API_PORT: {API_PORT}")

    if not CORS_ORIGINS:
        issues.append("CORS_ORIGINS must list at least one origin")

    return issues
