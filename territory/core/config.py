"""
Configuration constants and environment setup.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# CONFLICT RULES
# =============================================================================

EARTH_RADIUS_MILES = 3959.0
CONFLICT_RADIUS_MILES = float(os.environ.get("CONFLICT_RADIUS_MILES", "15.0"))

# =============================================================================
# PLACEHOLDER GEOCODING
# =============================================================================

REFERENCE_LATITUDE = float(os.environ.get("REFERENCE_LATITUDE", "40.7128"))
REFERENCE_LONGITUDE = float(os.environ.get("REFERENCE_LONGITUDE", "-74.0060"))
PLACEHOLDER_CITY = "City"
PLACEHOLDER_STATE = "NY"

# =============================================================================
# VALIDATION
# =============================================================================

POSTAL_CODE_PATTERN = os.environ.get("POSTAL_CODE_PATTERN", r"^\d{5}$")

# =============================================================================
# APPLICATION
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
SEED_DATA = os.environ.get("SEED_DATA", "true").lower() == "true"
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
