"""HTTP API for Pulse Claims."""
