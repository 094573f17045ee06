"""Dynamics organization service access."""
