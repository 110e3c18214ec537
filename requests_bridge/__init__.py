"""Injects the Requests plugin script into the Jellyfin web client at startup."""

__version__ = "1.0.0"
