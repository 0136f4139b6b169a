"""Utility helpers: identity lookups and console formatting."""
