"""Digest utility for claim-binding checks (at_hash, c_hash).

digest() returns raw digest bytes and applies no text encoding; callers
decide how to truncate and encode them. calc_claim_hash() is the OIDC
convenience on top: left half of the digest, base64url without padding.
"""

from __future__ import annotations

import re

from cryptography.hazmat.primitives import hashes
from jwt.utils import base64url_encode

from jwks_verifier.constants import ALLOWED_ALGORITHMS
from jwks_verifier.exceptions import InvalidInputError, UnsupportedAlgorithmError

__all__ = [
    "SUPPORTED_DIGESTS",
    "calc_claim_hash",
    "digest",
    "hex_to_bytes",
    "normalize_digest_name",
]

# Normalized name -> hash class. Accepts "SHA-256", "sha256", "SHA_256", ...
_DIGESTS: dict[str, type[hashes.HashAlgorithm]] = {
    "SHA1": hashes.SHA1,
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
}

SUPPORTED_DIGESTS: tuple[str, ...] = ("SHA-1", "SHA-256", "SHA-384", "SHA-512")

_HEX_STRING = re.compile(r"(?:[0-9a-fA-F]{2})*")


def normalize_digest_name(algorithm: str) -> str:
    """Normalize a digest name to its compact upper-case form ("SHA256").

    Raises:
        UnsupportedAlgorithmError: If the digest is not supported.
    """
    normalized = algorithm.upper().replace("-", "").replace("_", "") if isinstance(algorithm, str) else ""
    if normalized not in _DIGESTS:
        raise UnsupportedAlgorithmError(f"Unsupported digest algorithm: {algorithm!r}", algorithm=algorithm)
    return normalized


async def digest(value: str, algorithm: str) -> bytes:
    """Compute the digest of a string.

    Args:
        value: String to hash; encoded as UTF-8.
        algorithm: Digest name, e.g. "SHA-256".

    Returns:
        Raw digest bytes.

    Raises:
        InvalidInputError: If value is not a string.
        UnsupportedAlgorithmError: If the digest is not supported.
    """
    if not isinstance(value, str):
        raise InvalidInputError(f"Value to hash must be a string, got {type(value).__name__}")

    hasher = hashes.Hash(_DIGESTS[normalize_digest_name(algorithm)]())
    hasher.update(value.encode("utf-8"))
    return hasher.finalize()


async def calc_claim_hash(value: str, signing_algorithm: str) -> str:
    """Compute an OIDC claim hash (at_hash, c_hash) for a value.

    The digest size follows the token's signing algorithm (RS256 -> SHA-256);
    the result is the left-most half of the digest, base64url encoded
    without padding.

    Raises:
        UnsupportedAlgorithmError: If the signing algorithm is not allowed.
    """
    if signing_algorithm not in ALLOWED_ALGORITHMS:
        raise UnsupportedAlgorithmError(
            f"Cannot derive a claim hash for algorithm: {signing_algorithm!r}",
            algorithm=signing_algorithm,
        )

    digest_bytes = await digest(value, f"SHA-{signing_algorithm[2:]}")
    return base64url_encode(digest_bytes[: len(digest_bytes) // 2]).decode("ascii")


def hex_to_bytes(hex_string: str) -> bytes:
    """Decode a hex digest string (e.g. from a fixture or log) to bytes.

    Raises:
        InvalidInputError: If the string is not an even-length hex string.
            Whitespace is not accepted.
    """
    if not isinstance(hex_string, str) or not _HEX_STRING.fullmatch(hex_string):
        raise InvalidInputError(f"Not a hex string: {hex_string!r}")
    return bytes.fromhex(hex_string)
