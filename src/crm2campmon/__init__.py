"""Sync Dynamics contacts configuration with Campaign Monitor."""

__version__ = "0.1.0"
