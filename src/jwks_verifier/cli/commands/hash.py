"""Hash command for jwks-verifier CLI."""

import asyncio
import sys

import click

from jwks_verifier.constants import DEFAULT_DIGEST_ALGORITHM
from jwks_verifier.digest import calc_claim_hash, digest
from jwks_verifier.exceptions import JwksValidationError


@click.command("hash")
@click.argument("value")
@click.option("--alg", "algorithm", default=DEFAULT_DIGEST_ALGORITHM, show_default=True, help="Digest algorithm")
@click.option(
    "--claim-alg",
    default=None,
    help="Token signing algorithm; prints the at_hash/c_hash value instead of the hex digest",
)
def hash_value(value: str, algorithm: str, claim_alg: str | None) -> None:
    """Hash VALUE.

    Prints the hex digest, or with --claim-alg the OIDC claim hash.
    """
    try:
        if claim_alg:
            click.echo(asyncio.run(calc_claim_hash(value, claim_alg)))
        else:
            click.echo(asyncio.run(digest(value, algorithm)).hex())
    except JwksValidationError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
