"""CLI error handling helpers."""

import click

from smartledger.domain.errors import DomainError, IngestionError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, IngestionError) and error.upload_id is not None:
        click.echo(f"Upload {error.upload_id} marked as failed.", err=True)
    ctx.exit(1)
