"""
Configuration module for the Compliance Oracle service.

Deployment settings are read from environment variables with defaults.
Scoring thresholds and caps are build-time constants and live in
compliance_oracle.config instead.
"""

import os
from pathlib import Path
from typing import Dict

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("COMPLIANCE_ENV", "dev")  # dev|stage|prod

# Storage backend
STORE_BACKEND = os.getenv("COMPLIANCE_STORE", "memory")  # memory|sqlite
DB_PATH = os.getenv("COMPLIANCE_DB_PATH", "data/compliance.db")

# Administrator identity (comma-separated for more than one)
ADMIN_IDS = [a.strip() for a in os.getenv("COMPLIANCE_ADMIN_ID", "admin").split(",") if a.strip()]

# Logging
LOG_LEVEL = os.getenv("COMPLIANCE_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("COMPLIANCE_LOG_JSON", "true").lower() in ("1", "true", "yes")

# Intelligence report signing
SIGN_REPORTS = os.getenv("COMPLIANCE_SIGN_REPORTS", "").lower() in ("1", "true", "yes")
SIGNING_KEY_ID = os.getenv("COMPLIANCE_SIGNING_KEY_ID", "kid:compliance-service-001")
SIGNING_KEY_SEED = os.getenv("COMPLIANCE_SIGNING_KEY_SEED", "")  # 64 hex chars; generated if empty

# Initial block height of the service clock
START_HEIGHT = int(os.getenv("COMPLIANCE_START_HEIGHT", "0"))


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """
    Check the settings the service cannot start without.
    Returns dict of check -> passed.
    """
    checks = {
        "store_backend": STORE_BACKEND in ("memory", "sqlite"),
        "admin_ids": bool(ADMIN_IDS),
        "log_level": LOG_LEVEL.upper() in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        "start_height": START_HEIGHT >= 0,
    }

    if STORE_BACKEND == "sqlite":
        db_dir = Path(DB_PATH).parent
        checks["db_directory"] = DB_PATH == ":memory:" or db_dir.exists() or not is_production()

    if SIGN_REPORTS and SIGNING_KEY_SEED:
        checks["signing_key_seed"] = len(SIGNING_KEY_SEED) == 64

    return checks


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("COMPLIANCE_DEBUG", "").lower() in ("1", "true", "yes")
