"""Audit logging for signature validation."""

from jwks_verifier.telemetry.audit.validation_logger import (
    ValidationAuditLogger,
    create_validation_audit_logger,
)

__all__ = [
    "ValidationAuditLogger",
    "create_validation_audit_logger",
]
