"""Shared helpers used across services."""
