"""Retention sweeper for call-signaling rows."""

__version__ = "0.1.0"
