"""Audit logger for signature validation events.

Logs validation events to audit/validation.jsonl:
- Signature validation (success/failure)
- Key set refresh attempts

Each event is a ValidationEvent, serialized by JsonEventFormatter.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jwks_verifier.models import Key
from jwks_verifier.telemetry.models.audit import KeyInfo, ValidationEvent
from jwks_verifier.telemetry.system.system_logger import JsonEventFormatter

AUDIT_LOGGER_NAME = "jwks-verifier.audit.validation"


def _key_info(key: Key | None) -> KeyInfo | None:
    if key is None:
        return None
    return KeyInfo(kid=key.kid, kty=key.kty, use=key.use, alg=key.alg)


class ValidationAuditLogger:
    """Audit logger for signature validation events.

    Usage:
        audit = create_validation_audit_logger(Path("logs/audit/validation.jsonl"))
        handler = JwksValidationHandler(audit_logger=audit)
    """

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize validation audit logger.

        Args:
            logger: Logger with a JSON formatter attached.
        """
        self._logger = logger

    def _log_event(self, event: ValidationEvent) -> None:
        event_data = event.model_dump(mode="json", exclude={"time"}, exclude_none=True)
        self._logger.info(event_data)

    def log_signature_valid(
        self,
        *,
        alg: str,
        kid: str | None,
        key: Key,
        refreshed: bool,
        message: str | None = None,
    ) -> None:
        """Log a signature that verified.

        Args:
            alg: Header algorithm.
            kid: Header key id.
            key: Key that verified the signature.
            refreshed: Whether the key was found only after a refresh.
            message: Optional human-readable message.
        """
        self._log_event(
            ValidationEvent(
                event_type="signature_valid",
                status="Success",
                alg=alg,
                kid=kid,
                key=_key_info(key),
                refreshed=refreshed,
                message=message,
            )
        )

    def log_signature_invalid(
        self,
        *,
        alg: str | None,
        kid: str | None,
        error_type: str,
        error_message: str,
        key: Key | None = None,
        message: str | None = None,
    ) -> None:
        """Log a failed validation.

        Args:
            alg: Header algorithm, if the header could be read.
            kid: Header key id.
            error_type: Exception class name (e.g., "AmbiguousKeyError").
            error_message: Human-readable error description.
            key: Selected key, if selection got that far.
            message: Optional human-readable message.
        """
        self._log_event(
            ValidationEvent(
                event_type="signature_invalid",
                status="Failure",
                alg=alg,
                kid=kid,
                key=_key_info(key),
                error_type=error_type,
                error_message=error_message,
                message=message,
            )
        )

    def log_keys_refreshed(
        self,
        *,
        kid: str | None,
        key_count: int,
        message: str | None = None,
    ) -> None:
        """Log a key set refresh that produced a usable key set.

        Args:
            kid: Header key id that triggered the refresh.
            key_count: Number of keys in the refreshed set.
            message: Optional human-readable message.
        """
        self._log_event(
            ValidationEvent(
                event_type="keys_refreshed",
                status="Success",
                kid=kid,
                key_count=key_count,
                refreshed=True,
                message=message,
            )
        )

    def log_key_refresh_failed(
        self,
        *,
        kid: str | None,
        error_type: str,
        error_message: str,
        message: str | None = None,
    ) -> None:
        """Log a key set refresh callback that raised.

        Args:
            kid: Header key id that triggered the refresh.
            error_type: Class name of the supplier's exception.
            error_message: Human-readable error description.
            message: Optional human-readable message.
        """
        self._log_event(
            ValidationEvent(
                event_type="key_refresh_failed",
                status="Failure",
                kid=kid,
                error_type=error_type,
                error_message=error_message,
                message=message,
            )
        )


def create_validation_audit_logger(log_path: Path) -> ValidationAuditLogger:
    """Create an audit logger writing JSON lines to a file.

    Args:
        log_path: Path to validation.jsonl. Parent directories are created.
            Loggers for different paths are independent.

    Returns:
        ValidationAuditLogger: Configured logger for validation events.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # One logger per file; calling again for the same path replaces its handler
    logger = logging.getLogger(f"{AUDIT_LOGGER_NAME}.{log_path.resolve()}")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(JsonEventFormatter())
    logger.addHandler(handler)
    return ValidationAuditLogger(logger)
