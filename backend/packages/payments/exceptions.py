"""
Payment error taxonomy.

Only ``ValidationError`` (from common.core.exceptions) is ever blamed on the
caller; everything here is either a configuration problem or an "unknown, try
later" condition.
"""

from typing import Optional

from common.core.exceptions import AppException


class AuthenticationError(AppException):
    """Gateway credential exchange failed on every endpoint profile."""

    pass


class GatewayUnavailable(AppException):
    """Network, timeout or parse failure talking to the gateway.

    Means the payment status is unknown, never that the payment failed.
    """

    pass


class InvoiceCreationError(AppException):
    """The gateway did not return a usable invoice."""

    pass


class ReconciliationAmbiguous(AppException):
    """An inbound callback could not be mapped to any local transaction."""

    def __init__(self, message: str, identifiers: Optional[list] = None):
        super().__init__(message)
        self.identifiers = identifiers or []


class StateConflict(AppException):
    """The target is already in a different terminal state; treated as a no-op."""

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message)
        self.current_status = current_status
