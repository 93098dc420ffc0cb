"""Exceptions raised while validating a token signature against a key set.

Every failure of a validation call surfaces as one of these classes so callers
can tell them apart without parsing messages:

- InvalidInputError: missing token/header/key set, or a malformed key set
- UnsupportedAlgorithmError: algorithm not allowed or key family unknown
- AmbiguousKeyError: several signing keys match and no kid disambiguates
- KeyNotFoundError: no usable key, even after a key set refresh
- InvalidSignatureError: the signature did not verify
- RefreshFailedError: the key set supplier itself failed

All inherit from JwksValidationError, which is a ValueError.
"""

from __future__ import annotations

__all__ = [
    "JwksValidationError",
    "InvalidInputError",
    "UnsupportedAlgorithmError",
    "AmbiguousKeyError",
    "KeyNotFoundError",
    "InvalidSignatureError",
    "RefreshFailedError",
]


class JwksValidationError(ValueError):
    """Base class for all signature validation failures."""


class InvalidInputError(JwksValidationError):
    """Token, header or key set is missing or malformed."""


class UnsupportedAlgorithmError(JwksValidationError):
    """Algorithm is outside the allow-list or its key type cannot be inferred.

    Attributes:
        algorithm: The rejected algorithm name (may be None if it was missing).
    """

    def __init__(self, message: str, algorithm: str | None = None) -> None:
        super().__init__(message)
        self.algorithm = algorithm


class AmbiguousKeyError(JwksValidationError):
    """More than one signing key matches and the header carries no kid.

    Attributes:
        candidate_count: Number of keys that matched by type and use.
    """

    def __init__(self, message: str, candidate_count: int) -> None:
        super().__init__(message)
        self.candidate_count = candidate_count


class KeyNotFoundError(JwksValidationError):
    """No key in the key set can verify the token.

    Attributes:
        kid: Key id requested by the token header, None for the type+use lookup.
        refreshed_key_count: Size of the refreshed key set when a refresh ran
            and still had no matching key, otherwise None.
    """

    def __init__(self, message: str, kid: str | None = None, refreshed_key_count: int | None = None) -> None:
        super().__init__(message)
        self.kid = kid
        self.refreshed_key_count = refreshed_key_count

    @property
    def refreshed(self) -> bool:
        """Whether the key set was refreshed before giving up."""
        return self.refreshed_key_count is not None


class InvalidSignatureError(JwksValidationError):
    """Signature verification ran and failed, or could not be attempted."""


class RefreshFailedError(JwksValidationError):
    """The key set refresh callback raised.

    The original exception is chained as __cause__.
    """
