"""API route modules."""

from jarvis.api.routes import cache, chat, health, search, tasks

__all__ = ["cache", "chat", "health", "search", "tasks"]
