"""Request pipeline context."""
