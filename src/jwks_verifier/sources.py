"""Key set sources: JWKS files and HTTP JWKS endpoints.

These sit outside the validation core. The core only sees a KeySet and an
optional refresh callback; http_key_set_supplier() builds such a callback
from a jwks_uri.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx

from jwks_verifier.constants import DEFAULT_REFRESH_TIMEOUT_SECONDS
from jwks_verifier.exceptions import InvalidInputError
from jwks_verifier.models import KeySet
from jwks_verifier.refresh import RefreshCallback

__all__ = ["http_key_set_supplier", "load_key_set_file"]


def load_key_set_file(path: Path) -> KeySet:
    """Load a key set from a JWKS JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        InvalidInputError: If the file is not valid JSON or not a usable JWKS.
    """
    if not path.exists():
        raise FileNotFoundError(f"Key set file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Invalid JSON in key set file {path}: {e}") from e

    return KeySet.from_jwks(data)


def http_key_set_supplier(
    jwks_uri: str,
    *,
    timeout: float = DEFAULT_REFRESH_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RefreshCallback:
    """Build a refresh callback fetching the key set from a JWKS endpoint.

    Each call performs one GET; nothing is cached.

    Args:
        jwks_uri: URL of the JWKS endpoint (e.g. from OIDC discovery).
        timeout: HTTP timeout in seconds.
        transport: Optional httpx transport for testing.

    Returns:
        Async callable returning a fresh KeySet. Raises httpx.HTTPError on
        network or HTTP status errors.
    """

    async def fetch() -> KeySet:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout), transport=transport) as client:
            response = await client.get(jwks_uri)
            response.raise_for_status()
            return KeySet.from_jwks(response.json())

    return fetch
