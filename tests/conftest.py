"""Shared fixtures: signing keys, their JWKs, and signed tokens."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import ECAlgorithm, HMACAlgorithm, RSAAlgorithm

from jwks_verifier.telemetry.system.system_logger import SYSTEM_LOGGER_NAME

# 32 bytes: HS256 minimum recommended key length
HMAC_SECRET = b"0123456789abcdef0123456789abcdef"

TOKEN_PAYLOAD: dict[str, Any] = {
    "sub": "user-123",
    "iss": "https://issuer.example.com",
    "aud": "client-abc",
    "nonce": "n-0S6_WzA2Mj",
}


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """RSA key used to sign tokens."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_private_key() -> rsa.RSAPrivateKey:
    """Second, unrelated RSA key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    """P-256 key used to sign ES256 tokens."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def rsa_jwk(rsa_private_key: rsa.RSAPrivateKey) -> Callable[..., dict[str, Any]]:
    """Factory for the public JWK of rsa_private_key."""

    def _make(kid: str | None = "rsa-1", use: str | None = "sig", **extra: Any) -> dict[str, Any]:
        jwk = json.loads(RSAAlgorithm.to_jwk(rsa_private_key.public_key()))
        return _tag(jwk, kid, use, extra)

    return _make


@pytest.fixture
def other_rsa_jwk(other_rsa_private_key: rsa.RSAPrivateKey) -> Callable[..., dict[str, Any]]:
    """Factory for the public JWK of other_rsa_private_key."""

    def _make(kid: str | None = "rsa-2", use: str | None = "sig", **extra: Any) -> dict[str, Any]:
        jwk = json.loads(RSAAlgorithm.to_jwk(other_rsa_private_key.public_key()))
        return _tag(jwk, kid, use, extra)

    return _make


@pytest.fixture
def ec_jwk(ec_private_key: ec.EllipticCurvePrivateKey) -> Callable[..., dict[str, Any]]:
    """Factory for the public JWK of ec_private_key."""

    def _make(kid: str | None = "ec-1", use: str | None = "sig", **extra: Any) -> dict[str, Any]:
        jwk = json.loads(ECAlgorithm.to_jwk(ec_private_key.public_key()))
        return _tag(jwk, kid, use, extra)

    return _make


@pytest.fixture
def hmac_jwk() -> Callable[..., dict[str, Any]]:
    """Factory for the JWK of HMAC_SECRET."""

    def _make(kid: str | None = "hmac-1", use: str | None = "sig", **extra: Any) -> dict[str, Any]:
        jwk = json.loads(HMACAlgorithm.to_jwk(HMAC_SECRET))
        return _tag(jwk, kid, use, extra)

    return _make


@pytest.fixture
def sign_token(
    rsa_private_key: rsa.RSAPrivateKey,
    ec_private_key: ec.EllipticCurvePrivateKey,
) -> Callable[..., str]:
    """Factory signing TOKEN_PAYLOAD with the key matching the algorithm."""

    def _sign(algorithm: str = "RS256", kid: str | None = "rsa-1", key: Any = None) -> str:
        if key is None:
            if algorithm.startswith(("RS", "PS")):
                key = rsa_private_key
            elif algorithm.startswith("ES"):
                key = ec_private_key
            else:
                key = HMAC_SECRET
        headers = {"kid": kid} if kid is not None else None
        return jwt.encode(TOKEN_PAYLOAD, key, algorithm=algorithm, headers=headers)

    return _sign


def _tag(jwk: dict[str, Any], kid: str | None, use: str | None, extra: dict[str, Any]) -> dict[str, Any]:
    if kid is not None:
        jwk["kid"] = kid
    if use is not None:
        jwk["use"] = use
    jwk.update(extra)
    return jwk


@pytest.fixture(autouse=True)
def reset_system_logger():
    """Detach handlers added by configure_system_logger() after each test."""
    yield
    logger = logging.getLogger(SYSTEM_LOGGER_NAME)
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
