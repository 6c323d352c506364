"""Operator scripts for Pulse Claims."""
