"""Core configuration, errors and shared helpers."""
