"""Signature verification of a compact token with a selected key.

Steps:
1. Reject algorithms outside the allow-list before touching the key.
2. Split the token into exactly three segments.
3. Import the key's public members only (PyJWT PyJWK), scoped to the
   algorithm. Private members are dropped, so a JWK that also carries a
   private key can still only verify.
4. Verify the decoded signature against the original "header.payload"
   bytes, exactly as they were signed.

Any failure after step 2 is an InvalidSignatureError; nothing falls through
to success.
"""

from __future__ import annotations

import binascii
import re
from collections.abc import Iterable
from dataclasses import dataclass

from jwt import PyJWK
from jwt.exceptions import PyJWTError
from jwt.utils import base64url_decode

from jwks_verifier.constants import (
    ALLOWED_ALGORITHMS,
    TOKEN_SEGMENT_COUNT,
    TOKEN_SEGMENT_SEPARATOR,
)
from jwks_verifier.exceptions import (
    InvalidInputError,
    InvalidSignatureError,
    UnsupportedAlgorithmError,
)
from jwks_verifier.models import Key

__all__ = [
    "TokenSegments",
    "ensure_algorithm_allowed",
    "split_token",
    "verify_signature",
]

_BASE64URL_SEGMENT = re.compile(r"[A-Za-z0-9_-]+")


@dataclass(frozen=True)
class TokenSegments:
    """The three encoded segments of a compact token."""

    header: str
    payload: str
    signature: str

    @property
    def signing_input(self) -> bytes:
        """Bytes covered by the signature: the encoded header and payload."""
        return f"{self.header}{TOKEN_SEGMENT_SEPARATOR}{self.payload}".encode("ascii")

    def signature_bytes(self) -> bytes:
        """Decode the signature segment.

        Raises:
            InvalidSignatureError: If the segment is not valid base64url.
        """
        if not _BASE64URL_SEGMENT.fullmatch(self.signature):
            raise InvalidSignatureError("Signature segment is not base64url encoded")
        try:
            return base64url_decode(self.signature)
        except (binascii.Error, ValueError) as e:
            raise InvalidSignatureError("Signature segment could not be decoded") from e


def split_token(token: str) -> TokenSegments:
    """Split a compact token into header, payload and signature segments.

    Raises:
        InvalidInputError: Unless the token has exactly three non-empty segments
            and its header and payload are unpadded base64url.
    """
    if not isinstance(token, str) or not token:
        raise InvalidInputError("Parameter token expected")

    segments = token.split(TOKEN_SEGMENT_SEPARATOR)
    if len(segments) != TOKEN_SEGMENT_COUNT or not all(segments):
        raise InvalidInputError(
            f"Token must have {TOKEN_SEGMENT_COUNT} non-empty segments, got {len(segments)}"
        )
    if not segments[0].isascii() or not segments[1].isascii():
        raise InvalidInputError("Token segments must be ASCII")
    if not _BASE64URL_SEGMENT.fullmatch(segments[0]) or not _BASE64URL_SEGMENT.fullmatch(segments[1]):
        raise InvalidInputError("Token header and payload segments must be base64url encoded")

    return TokenSegments(header=segments[0], payload=segments[1], signature=segments[2])


def ensure_algorithm_allowed(algorithm: str | None, allowed_algorithms: Iterable[str] = ALLOWED_ALGORITHMS) -> str:
    """Gate an algorithm name against the allow-list.

    Raises:
        UnsupportedAlgorithmError: If the algorithm is missing or not allowed.
    """
    if not algorithm or algorithm not in allowed_algorithms:
        raise UnsupportedAlgorithmError(f"Algorithm not allowed: {algorithm!r}", algorithm=algorithm)
    return algorithm


async def verify_signature(
    token: str,
    key: Key,
    algorithm: str,
    *,
    allowed_algorithms: Iterable[str] = ALLOWED_ALGORITHMS,
) -> None:
    """Verify a compact token's signature with a key.

    Args:
        token: Compact token (header.payload.signature).
        key: Key selected for the token.
        algorithm: Algorithm from the token header.
        allowed_algorithms: Algorithms accepted by the caller.

    Raises:
        UnsupportedAlgorithmError: Algorithm not allowed (checked first).
        InvalidInputError: Token is not three segments.
        InvalidSignatureError: Key cannot be used with the algorithm, the
            signature cannot be decoded, or verification returned false.
    """
    ensure_algorithm_allowed(algorithm, allowed_algorithms)
    segments = split_token(token)

    if key.alg is not None and key.alg != algorithm:
        raise InvalidSignatureError(f"Key {key.kid or key.kty} is published for {key.alg}, token uses {algorithm}")

    try:
        verification_key = PyJWK(key.public_jwk(), algorithm=algorithm)
    except (PyJWTError, ValueError, KeyError, TypeError) as e:
        raise InvalidSignatureError(f"Key cannot verify {algorithm} signatures: {e}") from e

    signature = segments.signature_bytes()

    try:
        is_valid = verification_key.Algorithm.verify(segments.signing_input, verification_key.key, signature)
    except Exception as e:
        raise InvalidSignatureError(f"Signature verification failed: {e}") from e

    if not is_valid:
        raise InvalidSignatureError("Signature not valid")
