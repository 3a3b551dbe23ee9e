from enum import Enum


class Environment(str, Enum):
    """Environment profiles."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


PAYLINK_SANDBOX_BASE_URL = "https://restpilot.paylink.sa"
PAYLINK_PRODUCTION_BASE_URL = "https://restapi.paylink.sa"

# Seconds shaved off the gateway-declared token lifetime
TOKEN_EXPIRY_SAFETY_MARGIN_SECONDS = 300
