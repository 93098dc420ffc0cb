"""Key set, key and token header models.

A key set arrives as a JWKS document ({"keys": [...]}) using the member names
kid, kty, use and alg. It is parsed once, defensively, into immutable models:
a KeySet is never mutated after construction, and a key set refresh produces
a new KeySet rather than changing the existing one.

Example usage:
    key_set = KeySet.from_jwks(discovery_jwks)
    header = TokenHeader.from_dict(jwt.get_unverified_header(id_token))
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from jwks_verifier.constants import PRIVATE_KEY_MEMBERS
from jwks_verifier.exceptions import InvalidInputError

__all__ = [
    "Key",
    "KeySet",
    "TokenHeader",
    "Selected",
    "Ambiguous",
    "NotFound",
    "SelectionOutcome",
    "VerifiedSignature",
]


class Key(BaseModel):
    """A single JSON Web Key.

    Only the members used for selection are modelled. Raw key material
    (n, e, crv, x, y, k, ...) is kept as extra members and passed through
    unchanged to the key import.

    Attributes:
        kid: Key id, the key's identity when present.
        kty: Key type ("RSA", "EC", "oct", ...).
        use: Intended use ("sig", "enc"), if published.
        alg: Algorithm the key is intended for, if published.
    """

    model_config = ConfigDict(frozen=True, extra="allow", strict=True)

    kid: str | None = None
    kty: str
    use: str | None = None
    alg: str | None = None

    def to_jwk(self) -> dict[str, Any]:
        """Return the key as a JWK dict, including raw key material."""
        return self.model_dump(exclude_none=True)

    def public_jwk(self) -> dict[str, Any]:
        """Return the JWK without private members."""
        return {name: value for name, value in self.to_jwk().items() if name not in PRIVATE_KEY_MEMBERS}


@dataclass(frozen=True)
class KeySet:
    """Ordered, immutable collection of keys. Never empty."""

    keys: tuple[Key, ...]

    def __post_init__(self) -> None:
        if not self.keys:
            raise InvalidInputError("Key set contains no keys")

    def __iter__(self) -> Iterator[Key]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    @property
    def key_ids(self) -> list[str]:
        """Key ids present in the set, in order (keys without kid are skipped)."""
        return [key.kid for key in self.keys if key.kid is not None]

    @classmethod
    def from_jwks(cls, jwks: Any) -> KeySet:
        """Parse a JWKS document.

        Args:
            jwks: Decoded JWKS ({"keys": [...]}).

        Returns:
            KeySet with one Key per entry, in document order.

        Raises:
            InvalidInputError: If the document is not a mapping, "keys" is
                missing, not a list or empty, or an entry is not a valid JWK.
        """
        if not isinstance(jwks, Mapping):
            raise InvalidInputError(f"Key set must be a JSON object, got {type(jwks).__name__}")

        entries = jwks.get("keys")
        if not isinstance(entries, list) or not entries:
            raise InvalidInputError("Array 'keys' in key set missing or empty")

        keys: list[Key] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                raise InvalidInputError(f"Key set entry {index} is not a JSON object")
            try:
                keys.append(Key.model_validate(dict(entry)))
            except ValidationError as e:
                raise InvalidInputError(f"Key set entry {index} is malformed: {e.error_count()} invalid member(s)") from e

        return cls(keys=tuple(keys))

    @classmethod
    def coerce(cls, value: KeySet | Mapping[str, Any] | None) -> KeySet:
        """Accept either a parsed KeySet or a raw JWKS document."""
        if value is None:
            raise InvalidInputError("Parameter key_set expected")
        if isinstance(value, KeySet):
            return value
        return cls.from_jwks(value)


class TokenHeader(BaseModel):
    """Decoded JOSE header of a compact token.

    Attributes:
        alg: Signature algorithm claimed by the token.
        kid: Key id, None when absent (an empty string counts as absent).
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    alg: str
    kid: str | None = None

    @field_validator("kid", mode="before")
    @classmethod
    def _empty_kid_is_absent(cls, value: Any) -> Any:
        return value or None

    @classmethod
    def from_dict(cls, header: Mapping[str, Any]) -> TokenHeader:
        """Build a header from a decoded header mapping.

        Raises:
            InvalidInputError: If alg is missing or not a string, or kid is not a string.
        """
        alg = header.get("alg")
        if not isinstance(alg, str) or not alg:
            raise InvalidInputError("Token header has no 'alg'")

        kid = header.get("kid")
        if kid is not None and not isinstance(kid, str):
            raise InvalidInputError("Token header 'kid' must be a string")

        extra = {name: value for name, value in header.items() if name not in ("alg", "kid")}
        return cls(alg=alg, kid=kid, **extra)

    @classmethod
    def coerce(cls, value: TokenHeader | Mapping[str, Any] | None) -> TokenHeader:
        """Accept either a TokenHeader or a decoded header mapping."""
        if value is None:
            raise InvalidInputError("Parameter header expected")
        if isinstance(value, TokenHeader):
            return value
        if not isinstance(value, Mapping):
            raise InvalidInputError(f"Token header must be a mapping, got {type(value).__name__}")
        return cls.from_dict(value)


# =============================================================================
# Selection Outcomes
# =============================================================================


@dataclass(frozen=True)
class Selected:
    """Exactly one key was chosen."""

    key: Key


@dataclass(frozen=True)
class Ambiguous:
    """Several keys matched by type and use, none named by kid."""

    candidates: tuple[Key, ...]


@dataclass(frozen=True)
class NotFound:
    """No key matched."""


SelectionOutcome = Selected | Ambiguous | NotFound


@dataclass(frozen=True)
class VerifiedSignature:
    """Result of a successful validation.

    Attributes:
        key: Key that verified the signature.
        algorithm: Algorithm the signature was verified with.
        refreshed: True if the key was only found after a key set refresh.
    """

    key: Key
    algorithm: str
    refreshed: bool = False
