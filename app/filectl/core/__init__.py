"""Core reconciliation machinery for filectl."""
