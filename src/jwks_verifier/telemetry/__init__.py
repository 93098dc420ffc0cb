"""Telemetry: system logging and validation audit logging."""
