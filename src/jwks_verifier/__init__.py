"""jwks-verifier: verify OIDC id_token signatures against a JSON Web Key Set.

Example:
    from jwks_verifier import KeySet, validate

    result = await validate(id_token, header, KeySet.from_jwks(jwks), refresh=load_keys)
"""

__version__ = "0.1.0"

from jwks_verifier.digest import calc_claim_hash, digest
from jwks_verifier.exceptions import (
    AmbiguousKeyError,
    InvalidInputError,
    InvalidSignatureError,
    JwksValidationError,
    KeyNotFoundError,
    RefreshFailedError,
    UnsupportedAlgorithmError,
)
from jwks_verifier.handler import JwksValidationHandler, validate
from jwks_verifier.models import Key, KeySet, TokenHeader, VerifiedSignature

__all__ = [
    "__version__",
    # Entry points
    "validate",
    "digest",
    "calc_claim_hash",
    "JwksValidationHandler",
    # Models
    "Key",
    "KeySet",
    "TokenHeader",
    "VerifiedSignature",
    # Exceptions
    "JwksValidationError",
    "InvalidInputError",
    "UnsupportedAlgorithmError",
    "AmbiguousKeyError",
    "KeyNotFoundError",
    "InvalidSignatureError",
    "RefreshFailedError",
]
