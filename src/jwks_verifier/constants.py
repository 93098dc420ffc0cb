"""Application-wide constants for jwks-verifier.

Constants that define verification behavior.
For user-configurable settings per deployment, see config.py.
"""

# ============================================================================
# Signature Algorithms
# ============================================================================

# Algorithms a token may be verified with. Anything else (including "none")
# is rejected before a key is ever imported.
ALLOWED_ALGORITHMS: tuple[str, ...] = (
    "HS256",
    "HS384",
    "HS512",
    "RS256",
    "RS384",
    "RS512",
    "ES256",
    "ES384",
    "ES512",
    "PS256",
    "PS384",
    "PS512",
)

# Algorithm family prefix -> JWK "kty" of the keys that can verify it
ALGORITHM_FAMILY_KEY_TYPES: dict[str, str] = {
    "RS": "RSA",
    "PS": "RSA",
    "ES": "EC",
    "HS": "oct",
}

# Key types backed by a shared secret. These have no public discovery
# mechanism, so the type+use fallback is disabled for them unless configured.
SYMMETRIC_KEY_TYPES: frozenset[str] = frozenset({"oct"})

# ============================================================================
# Key Set (JWKS) Members
# ============================================================================

# JWK "use" value of keys intended for signature verification
SIGNATURE_KEY_USE: str = "sig"

# Private key members (RFC 7518 section 6). Stripped before import so that
# only verification keys are materialized.
PRIVATE_KEY_MEMBERS: frozenset[str] = frozenset({"d", "p", "q", "dp", "dq", "qi", "oth"})

# ============================================================================
# Compact Token Format
# ============================================================================

TOKEN_SEGMENT_SEPARATOR: str = "."
TOKEN_SEGMENT_COUNT: int = 3

# ============================================================================
# Key Set Refresh
# ============================================================================

# Number of key set refreshes allowed per validation call
MAX_KEY_SET_REFRESHES: int = 1

# Timeout for fetching a replacement key set over HTTP (seconds)
# The core imposes no timeout; this bounds the CLI's HTTP supplier.
DEFAULT_REFRESH_TIMEOUT_SECONDS: float = 10.0
MAX_REFRESH_TIMEOUT_SECONDS: float = 120.0

# ============================================================================
# Digests
# ============================================================================

# Default digest for `jwks-verifier hash`
DEFAULT_DIGEST_ALGORITHM: str = "SHA-256"
