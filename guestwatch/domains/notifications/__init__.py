"""Notifications domain: per-recipient inbox entries written in batches."""
