"""Verify command for jwks-verifier CLI.

Decodes the token header, loads the key set from a JWKS file and verifies the
signature. With --jwks-uri, the endpoint is fetched once if the file has no
matching key (key rotation).
"""

import asyncio
import sys
from pathlib import Path

import click
import jwt

from jwks_verifier.config import VerifierConfig
from jwks_verifier.exceptions import JwksValidationError
from jwks_verifier.handler import JwksValidationHandler
from jwks_verifier.models import KeySet
from jwks_verifier.refresh import RefreshCallback
from jwks_verifier.sources import http_key_set_supplier, load_key_set_file
from jwks_verifier.telemetry.audit.validation_logger import create_validation_audit_logger
from jwks_verifier.telemetry.system.system_logger import configure_system_logger


def _with_timeout(refresh: RefreshCallback, timeout: float) -> RefreshCallback:
    async def bounded() -> KeySet:
        return await asyncio.wait_for(refresh(), timeout)

    return bounded


@click.command("verify")
@click.argument("token")
@click.option(
    "--jwks",
    "jwks_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to JWKS file ({\"keys\": [...]})",
)
@click.option(
    "--jwks-uri",
    default=None,
    help="JWKS endpoint to fetch once if no key in the file matches",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to verifier config (JSON)",
)
def verify(token: str, jwks_path: Path, jwks_uri: str | None, config_path: Path | None) -> None:
    """Verify a token's signature.

    Exit codes:
        0: Signature valid
        1: Validation failed or invalid input
    """
    try:
        config = VerifierConfig.load_from_file(config_path) if config_path else VerifierConfig()
        header = jwt.get_unverified_header(token)
        key_set = load_key_set_file(jwks_path)
    except (FileNotFoundError, ValueError, jwt.PyJWTError) as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    log_path = config.logging.system_log_path
    configure_system_logger(config.logging.log_level, Path(log_path) if log_path else None)
    audit_logger = (
        create_validation_audit_logger(Path(config.logging.audit_log_path))
        if config.logging.audit_log_path
        else None
    )

    refresh = None
    if jwks_uri:
        timeout = config.refresh_timeout_seconds
        refresh = _with_timeout(http_key_set_supplier(jwks_uri, timeout=timeout), timeout)

    handler = JwksValidationHandler(config, audit_logger=audit_logger)
    try:
        result = asyncio.run(handler.validate(token, header, key_set, refresh))
    except JwksValidationError as e:
        click.echo(f"✗ {type(e).__name__}: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Signature valid (kid={result.key.kid or '-'}, alg={result.algorithm})")
    if result.refreshed:
        click.echo("  Key found after fetching the key set from --jwks-uri")
