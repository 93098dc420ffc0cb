"""Validates the signature of an id_token against one of the keys of a JWKS.

The key set is typically published via the issuer's discovery document.
A validation call is a single linear pipeline:

1. Check inputs (token, header, non-empty key set)
2. Gate the header algorithm against the allow-list
3. Select the key, refreshing the key set at most once on a miss
4. Verify the signature with the selected key

Every failure is raised as a JwksValidationError subclass, logged to the
system logger and, when an audit logger is configured, recorded as an
audit event. There is no path to success other than a verified signature.

Concurrency: the handler holds configuration only. Each call works on its
own key set reference, so concurrent calls share no mutable state.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jwks_verifier.config import VerifierConfig
from jwks_verifier.digest import digest
from jwks_verifier.exceptions import (
    InvalidInputError,
    JwksValidationError,
    KeyNotFoundError,
    RefreshFailedError,
)
from jwks_verifier.models import Key, KeySet, TokenHeader, VerifiedSignature
from jwks_verifier.refresh import RefreshCallback, select_with_refresh
from jwks_verifier.telemetry.audit.validation_logger import ValidationAuditLogger
from jwks_verifier.telemetry.system.system_logger import get_system_logger
from jwks_verifier.verifier import ensure_algorithm_allowed, verify_signature

__all__ = ["JwksValidationHandler", "validate"]


class JwksValidationHandler:
    """Signature validation against a JSON Web Key Set.

    Usage:
        handler = JwksValidationHandler()
        result = await handler.validate(id_token, header, jwks, refresh=load_keys)
        print(f"Verified with {result.key.kid}")

    Raises (from validate):
        InvalidInputError, UnsupportedAlgorithmError, AmbiguousKeyError,
        KeyNotFoundError, InvalidSignatureError, RefreshFailedError.
    """

    def __init__(
        self,
        config: VerifierConfig | None = None,
        audit_logger: ValidationAuditLogger | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            config: Verifier configuration (default: built-in allow-list).
            audit_logger: Optional audit logger for validation events.
        """
        self._config = config or VerifierConfig()
        self._audit = audit_logger
        self._logger = get_system_logger()

    @property
    def allowed_algorithms(self) -> tuple[str, ...]:
        """Algorithms this handler accepts."""
        return tuple(self._config.allowed_algorithms)

    async def validate(
        self,
        token: str,
        header: TokenHeader | Mapping[str, Any],
        key_set: KeySet | Mapping[str, Any],
        refresh: RefreshCallback | None = None,
    ) -> VerifiedSignature:
        """Validate a token's signature.

        Args:
            token: Compact token (header.payload.signature).
            header: Decoded token header (TokenHeader or mapping).
            key_set: Candidate keys (KeySet or raw JWKS mapping). Not modified.
            refresh: Optional async supplier of a replacement key set,
                awaited at most once.

        Returns:
            VerifiedSignature describing the key that verified the token.

        Raises:
            JwksValidationError: Subclass describing the failure.
        """
        parsed_header: TokenHeader | None = None
        selected: Key | None = None
        try:
            if not token:
                raise InvalidInputError("Parameter token expected")
            parsed_header = TokenHeader.coerce(header)
            working_set = KeySet.coerce(key_set)
            ensure_algorithm_allowed(parsed_header.alg, self.allowed_algorithms)

            resolved = await select_with_refresh(
                parsed_header,
                working_set,
                refresh,
                allow_symmetric_fallback=self._config.allow_symmetric_fallback,
            )
            selected = resolved.key
            if resolved.refreshed and self._audit is not None:
                self._audit.log_keys_refreshed(kid=parsed_header.kid, key_count=len(resolved.key_set))

            await verify_signature(
                token,
                resolved.key,
                parsed_header.alg,
                allowed_algorithms=self.allowed_algorithms,
            )
        except JwksValidationError as e:
            self._record_failure(e, parsed_header, selected)
            raise

        self._logger.debug(
            {
                "event": "signature_valid",
                "message": "Token signature verified",
                "alg": parsed_header.alg,
                "kid": resolved.key.kid,
                "refreshed": resolved.refreshed,
            }
        )
        if self._audit is not None:
            self._audit.log_signature_valid(
                alg=parsed_header.alg,
                kid=parsed_header.kid,
                key=resolved.key,
                refreshed=resolved.refreshed,
            )

        return VerifiedSignature(key=resolved.key, algorithm=parsed_header.alg, refreshed=resolved.refreshed)

    async def calc_hash(self, value: str, algorithm: str) -> bytes:
        """Compute the raw digest of a value (see jwks_verifier.digest.digest)."""
        return await digest(value, algorithm)

    def _record_failure(
        self,
        error: JwksValidationError,
        header: TokenHeader | None,
        key: Key | None,
    ) -> None:
        alg = header.alg if header is not None else None
        kid = header.kid if header is not None else None

        self._logger.warning(
            {
                "event": "signature_validation_failed",
                "message": str(error),
                "error_type": type(error).__name__,
                "alg": alg,
                "kid": kid,
            }
        )
        if self._audit is None:
            return

        if isinstance(error, KeyNotFoundError) and error.refreshed:
            self._audit.log_keys_refreshed(kid=kid, key_count=error.refreshed_key_count)
        if isinstance(error, RefreshFailedError):
            cause = error.__cause__
            self._audit.log_key_refresh_failed(
                kid=kid,
                error_type=type(cause).__name__ if cause is not None else type(error).__name__,
                error_message=str(error),
            )
        self._audit.log_signature_invalid(
            alg=alg,
            kid=kid,
            key=key,
            error_type=type(error).__name__,
            error_message=str(error),
        )


async def validate(
    token: str,
    header: TokenHeader | Mapping[str, Any],
    key_set: KeySet | Mapping[str, Any],
    refresh: RefreshCallback | None = None,
) -> VerifiedSignature:
    """Validate a token's signature with the default configuration.

    See JwksValidationHandler.validate.
    """
    return await JwksValidationHandler().validate(token, header, key_set, refresh)
