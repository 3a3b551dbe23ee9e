"""API schemas for payments."""
