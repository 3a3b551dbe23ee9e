# Test data and fixtures
from packages.payments.models.domain.gateway import (
    GatewayLookupResult,
    GatewayPaymentData,
)


def paid_lookup(**overrides) -> GatewayLookupResult:
    """Gateway lookup reporting a settled payment."""
    data = {
        "status": "Paid",
        "paid_date": "2026-06-01 10:00:00",
        "transaction_no": "1718000000001",
        "raw": {"orderStatus": "Paid"},
    }
    data.update(overrides)
    return GatewayLookupResult(success=True, data=GatewayPaymentData(**data))


def failed_lookup(**overrides) -> GatewayLookupResult:
    """Gateway lookup reporting a declined payment."""
    data = {"status": "Failed", "error_code": "05", "raw": {"orderStatus": "Failed"}}
    data.update(overrides)
    return GatewayLookupResult(success=True, data=GatewayPaymentData(**data))


def pending_lookup() -> GatewayLookupResult:
    return GatewayLookupResult(
        success=True, data=GatewayPaymentData(status="Pending", raw={})
    )


def unavailable_lookup() -> GatewayLookupResult:
    return GatewayLookupResult.unavailable("timed out")
