"""Polling-based synchronization and notification engine for a chat client."""

__version__ = "0.1.0"
