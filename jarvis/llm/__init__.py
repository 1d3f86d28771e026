"""LLM completion layer."""
