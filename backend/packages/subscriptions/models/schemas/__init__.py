"""API schemas for subscriptions."""
