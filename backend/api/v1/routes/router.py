from fastapi import APIRouter

from api.v1.routes import (
    health,
)
from packages.payments.routes import callbacks, checkout, history, status
from packages.subscriptions.routes import subscriptions

api_router = APIRouter()

# Health check (no auth required)
api_router.include_router(health.router, prefix="/health", tags=["health"])

# Paylink callbacks (no auth - every outcome is verified with the gateway)
api_router.include_router(callbacks.router, prefix="/paylink", tags=["paylink"])

# Payments (checkout and history require auth, status polling takes it optionally)
api_router.include_router(checkout.router, prefix="/payments", tags=["payments"])
api_router.include_router(status.router, prefix="/payments", tags=["payments"])
api_router.include_router(history.router, prefix="/payments", tags=["payments"])

# Subscriptions (plan catalog public, the rest auth-protected per endpoint)
api_router.include_router(
    subscriptions.router, prefix="/subscriptions", tags=["subscriptions"]
)
