"""Pulse Claims: daily reward claim authorization and settlement service."""

__version__ = "0.1.0"
