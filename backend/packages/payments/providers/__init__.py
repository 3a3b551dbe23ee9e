"""Payment providers - abstracted external platform integrations."""
