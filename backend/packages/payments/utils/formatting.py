"""
Amount and reference helpers shared by the gateway client and checkout.
"""

import random
import re
import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

TWO_PLACES = Decimal("0.01")

# Any run of slashes not directly after the scheme colon
_DUPLICATE_SLASHES = re.compile(r"([^:])/{2,}")


def generate_reference_number(prefix: str = "WP") -> str:
    """``{prefix}-{epoch millis}-{4 random digits}``, e.g. ``SUB-1718000000000-4821``."""
    timestamp = int(time.time() * 1000)
    suffix = random.randint(1000, 9999)
    return f"{prefix}-{timestamp}-{suffix}"


def format_amount(value: Any) -> Decimal:
    """Coerce ``value`` to a 2-decimal amount; invalid input becomes 0.00."""
    try:
        if isinstance(value, bool) or value is None:
            raise InvalidOperation
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            raise InvalidOperation
        return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as e:
        logger.error(f"Invalid amount {value!r}: {e!r}")
        return Decimal("0.00")


def collapse_slashes(url: str) -> str:
    return _DUPLICATE_SLASHES.sub(r"\1/", url)
