"""Key selection with a single key set refresh.

When the held key set has no key for a token (typically after the issuer
rotated its keys), the caller-supplied refresh callback is awaited once and
selection runs once more against its result. The caller's key set is never
modified; the refreshed set replaces a local working reference only and is
never merged with the previous one.

Ambiguity is final: a fresh key set cannot tell two candidate keys apart,
so it is reported without refreshing.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from jwks_verifier.constants import MAX_KEY_SET_REFRESHES
from jwks_verifier.exceptions import (
    AmbiguousKeyError,
    JwksValidationError,
    KeyNotFoundError,
    RefreshFailedError,
)
from jwks_verifier.models import Ambiguous, Key, KeySet, Selected, TokenHeader
from jwks_verifier.selection import select_key
from jwks_verifier.telemetry.system.system_logger import get_system_logger

__all__ = ["RefreshCallback", "ResolvedKey", "select_with_refresh"]

# Returns a complete replacement key set (parsed or raw JWKS) or raises
RefreshCallback = Callable[[], Awaitable[KeySet | Mapping[str, Any]]]

_logger = get_system_logger()


@dataclass(frozen=True)
class ResolvedKey:
    """Key chosen for a token, with the key set it came from."""

    key: Key
    key_set: KeySet
    refreshed: bool


async def select_with_refresh(
    header: TokenHeader,
    key_set: KeySet,
    refresh: RefreshCallback | None = None,
    *,
    allow_symmetric_fallback: bool = False,
) -> ResolvedKey:
    """Select a key, refreshing the key set at most once on a miss.

    Args:
        header: Decoded token header.
        key_set: Key set currently held by the caller. Not modified.
        refresh: Optional async supplier of a replacement key set.
        allow_symmetric_fallback: Forwarded to select_key.

    Returns:
        ResolvedKey with the selected key.

    Raises:
        AmbiguousKeyError: Several keys match and no kid is given.
        KeyNotFoundError: No key matches, after the refresh if one was allowed.
        RefreshFailedError: The refresh callback raised.
        InvalidInputError: The refresh callback returned an unusable key set.
        UnsupportedAlgorithmError: The key type cannot be inferred.
    """
    working_set = key_set
    refreshes = 0

    while True:
        outcome = select_key(header, working_set, allow_symmetric_fallback=allow_symmetric_fallback)

        if isinstance(outcome, Selected):
            return ResolvedKey(key=outcome.key, key_set=working_set, refreshed=refreshes > 0)

        if isinstance(outcome, Ambiguous):
            raise AmbiguousKeyError(
                "More than one matching key found. Please specify a kid in the token header.",
                candidate_count=len(outcome.candidates),
            )

        if refresh is None or refreshes >= MAX_KEY_SET_REFRESHES:
            raise _key_not_found(header, len(working_set) if refreshes else None)

        _logger.debug(
            {
                "event": "key_set_refresh_started",
                "message": "No matching key in key set, refreshing",
                "kid": header.kid,
                "alg": header.alg,
                "key_count": len(working_set),
            }
        )
        working_set = await _refresh_key_set(refresh)
        refreshes += 1


async def _refresh_key_set(refresh: RefreshCallback) -> KeySet:
    """Await the refresh callback and parse its result.

    Raises:
        RefreshFailedError: If the callback raised.
        InvalidInputError: If the result is not a usable key set.
    """
    try:
        result = await refresh()
    except JwksValidationError:
        raise
    except Exception as e:
        raise RefreshFailedError(f"Key set refresh failed: {e}") from e

    refreshed = KeySet.coerce(result)
    _logger.info(
        {
            "event": "key_set_refreshed",
            "message": f"Key set refreshed ({len(refreshed)} keys)",
            "key_count": len(refreshed),
            "key_ids": refreshed.key_ids,
        }
    )
    return refreshed


def _key_not_found(header: TokenHeader, refreshed_key_count: int | None) -> KeyNotFoundError:
    if header.kid is not None:
        return KeyNotFoundError(
            "Expected key not found in key set. "
            "The key set is most likely loaded with the discovery document. "
            f"Expected key id (kid): {header.kid}",
            kid=header.kid,
            refreshed_key_count=refreshed_key_count,
        )
    return KeyNotFoundError(
        f"No matching key found for algorithm {header.alg}",
        refreshed_key_count=refreshed_key_count,
    )
