"""Alerts domain: flagged-guest records with an Open -> Resolved lifecycle."""

__all__ = [
    "models",
    "schemas",
    "repository",
    "router",
]
