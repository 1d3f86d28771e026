"""Web search aggregation."""
