"""Cache store."""
