"""Payment utilities."""
