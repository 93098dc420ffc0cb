"""Key selection: pick the one key a token header is entitled to.

Rules, in order:
1. Header has a kid: the first key with that kid, otherwise NotFound.
2. No kid: infer the key type from the algorithm family and keep the keys
   with that kty and use "sig". One match is Selected, several are
   Ambiguous (never resolved by picking one), none is NotFound.

An algorithm whose family has no known key type raises
UnsupportedAlgorithmError rather than reporting NotFound.
"""

from __future__ import annotations

from jwks_verifier.constants import (
    ALGORITHM_FAMILY_KEY_TYPES,
    SIGNATURE_KEY_USE,
    SYMMETRIC_KEY_TYPES,
)
from jwks_verifier.exceptions import UnsupportedAlgorithmError
from jwks_verifier.models import Ambiguous, KeySet, NotFound, Selected, SelectionOutcome, TokenHeader

__all__ = ["key_type_for_algorithm", "select_key"]


def key_type_for_algorithm(algorithm: str) -> str:
    """Infer the JWK key type able to verify an algorithm.

    Args:
        algorithm: JWS algorithm name, e.g. "RS256".

    Returns:
        "RSA" for RS*/PS*, "EC" for ES*, "oct" for HS*.

    Raises:
        UnsupportedAlgorithmError: If the algorithm family is unknown.
    """
    key_type = ALGORITHM_FAMILY_KEY_TYPES.get(algorithm[:2]) if algorithm else None
    if key_type is None:
        raise UnsupportedAlgorithmError(f"Cannot infer key type from algorithm: {algorithm!r}", algorithm=algorithm)
    return key_type


def select_key(
    header: TokenHeader,
    key_set: KeySet,
    *,
    allow_symmetric_fallback: bool = False,
) -> SelectionOutcome:
    """Select the key matching a token header.

    Args:
        header: Decoded token header.
        key_set: Candidate keys.
        allow_symmetric_fallback: Permit the type+use lookup for HS* tokens
            without a kid. Off by default: shared secrets are expected to be
            named explicitly.

    Returns:
        Selected, Ambiguous or NotFound.

    Raises:
        UnsupportedAlgorithmError: If no kid is given and the key type cannot
            be inferred, or the algorithm is symmetric and the fallback is off.
    """
    if header.kid is not None:
        for key in key_set:
            if key.kid == header.kid:
                return Selected(key)
        return NotFound()

    key_type = key_type_for_algorithm(header.alg)
    if key_type in SYMMETRIC_KEY_TYPES and not allow_symmetric_fallback:
        raise UnsupportedAlgorithmError(
            f"Symmetric algorithm {header.alg} requires a kid in the token header",
            algorithm=header.alg,
        )

    candidates = tuple(key for key in key_set if key.kty == key_type and key.use == SIGNATURE_KEY_USE)

    if len(candidates) == 1:
        return Selected(candidates[0])
    if len(candidates) > 1:
        return Ambiguous(candidates)
    return NotFound()
