"""
Factory for payment gateway.

Currently hardcoded to Paylink. The token cache is shared by every client in
the process so a token is exchanged once per lifetime, not once per request.
"""

from packages.payments.providers.gateway.interface import PaymentGatewayInterface
from packages.payments.providers.gateway.paylink_gateway import PaylinkGateway
from packages.payments.providers.gateway.token_cache import TokenCache

_token_cache = TokenCache()


def get_token_cache() -> TokenCache:
    return _token_cache


def get_payment_gateway() -> PaymentGatewayInterface:
    """
    Get configured payment gateway.

    Returns:
        PaylinkGateway instance
    """
    return PaylinkGateway(token_cache=get_token_cache())
