"""
Log and audit-snapshot sanitization.

Gateway callbacks carry 3-D Secure authentication blobs and occasionally card
fragments; none of it may reach logs or the stored gateway response.
"""

from typing import Any

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset(
    {
        "pares",
        "md",
        "cvv",
        "cvc",
        "card",
        "cardnumber",
        "card_number",
        "pan",
        "password",
        "secret",
        "secretkey",
        "secret_key",
        "apisecret",
        "token",
        "id_token",
        "access_token",
        "authorization",
    }
)


def _is_sensitive(key: str) -> bool:
    return key.lower().replace("-", "_") in SENSITIVE_KEYS


def redact_sensitive(value: Any) -> Any:
    """Return a copy of ``value`` with sensitive keys masked at any depth."""
    if isinstance(value, dict):
        return {
            k: (REDACTED if _is_sensitive(str(k)) else redact_sensitive(v))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_sensitive(item) for item in value]
    return value
