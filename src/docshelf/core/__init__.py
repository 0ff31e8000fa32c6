"""Core rendering, routing and navigation."""
