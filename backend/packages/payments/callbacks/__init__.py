"""Inbound Paylink callback handling (parsing, identifier extraction, 3DS)."""
