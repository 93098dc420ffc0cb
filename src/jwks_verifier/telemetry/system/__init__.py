"""System (operational) logging."""

from jwks_verifier.telemetry.system.system_logger import (
    JsonEventFormatter,
    configure_system_logger,
    get_system_logger,
)

__all__ = [
    "JsonEventFormatter",
    "configure_system_logger",
    "get_system_logger",
]
