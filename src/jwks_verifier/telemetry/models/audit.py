from __future__ import annotations
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field


class KeyInfo(BaseModel):
    """
    The key a signature was checked against, for validation logs.
    Only public identifying members; never key material.
    """

    kid: Optional[str] = None  # JWK 'kid'
    kty: Optional[str] = None  # JWK 'kty'
    use: Optional[str] = None  # JWK 'use'
    alg: Optional[str] = None  # JWK 'alg'


class ValidationEvent(BaseModel):
    """
    One signature validation log entry (audit/validation.jsonl).

    Records:
    - Signature validation outcome (valid/invalid)
    - Key set refreshes (success/failure)
    """

    model_config = ConfigDict(extra="forbid")

    # --- core ---
    time: Optional[str] = Field(
        None,
        description="ISO 8601 timestamp, added by formatter during serialization",
    )
    event_type: Literal[
        "signature_valid",
        "signature_invalid",
        "keys_refreshed",
        "key_refresh_failed",
    ]
    status: Literal["Success", "Failure"]

    # --- token header ---
    alg: Optional[str] = None  # header 'alg'
    kid: Optional[str] = None  # header 'kid' (None if the header had none)

    # --- key ---
    key: Optional[KeyInfo] = None  # selected key, if selection succeeded
    refreshed: Optional[bool] = None  # key found only after a key set refresh
    key_count: Optional[int] = None  # size of the key set (after refresh)

    # --- context ---
    message: Optional[str] = None  # Human-readable status message

    # --- errors (for failure events) ---
    error_type: Optional[str] = None  # e.g. "KeyNotFoundError"
    error_message: Optional[str] = None  # Detailed error message
