"""Main CLI entry point for jwks-verifier.

Defines the CLI group and registers all subcommands.

Commands:
    verify  - Verify a token's signature against a JWKS file (and jwks_uri)
    hash    - Compute a digest or an OIDC claim hash (at_hash, c_hash)

Usage:
    jwks-verifier -h, --help      Show help message
    jwks-verifier -v, --version   Show version
    jwks-verifier verify TOKEN --jwks jwks.json
    jwks-verifier hash VALUE --alg SHA-256

Subcommand help:
    jwks-verifier COMMAND -h      Show help for a specific command
"""

import sys

import click

from jwks_verifier import __version__

from .commands.hash import hash_value
from .commands.verify import verify


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Examples:
  jwks-verifier verify "$ID_TOKEN" --jwks jwks.json
  jwks-verifier verify "$ID_TOKEN" --jwks jwks.json \\
    --jwks-uri https://issuer.example.com/.well-known/jwks.json
  jwks-verifier hash "$ACCESS_TOKEN" --claim-alg RS256

Exit codes:
  0   Signature valid / hash computed
  1   Validation failed or invalid input
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """jwks-verifier: Verify id_token signatures against a JSON Web Key Set."""
    if version:
        click.echo(f"jwks-verifier {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(verify)
cli.add_command(hash_value)


def main() -> None:
    """CLI entry point."""
    cli()
