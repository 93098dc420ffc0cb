"""Command-line interface for jwks-verifier.

Provides commands for verifying token signatures against a key set
and computing claim-binding hashes.
"""

from .main import cli, main

__all__ = ["cli", "main"]
