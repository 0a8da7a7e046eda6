"""Watchlist domain: flagged identity values and exact-match lookup."""

__all__ = [
    "models",
    "schemas",
    "repository",
    "service",
    "router",
]
