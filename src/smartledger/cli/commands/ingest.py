"""Categorizer response ingestion command."""

from pathlib import Path

import click
from smartledger.cli.error_handling import handle_domain_error
from smartledger.domain.ingestion import IngestionService
from smartledger.utils.response_parser import extract_candidates, parse_categorizer_response


@click.command("ingest")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--file-name", help="Original statement file name (defaults to RESPONSE_FILE)")
@click.option("--file-type", help="Original statement file type (csv, xlsx, txt, ...)")
@click.pass_context
def ingest_response(ctx, response_file: str, file_name: str | None, file_type: str | None):
    """Ingest a categorizer response and post its transactions.

    RESPONSE_FILE holds the categorizer's JSON answer for one statement. It
    may be wrapped in markdown fences or truncated; what can be recovered is
    ingested.

    Examples:
        smartledger ingest response.json --file-name statement-2025-01.csv
    """
    db = ctx.obj["db"]
    service = IngestionService(db)

    text = Path(response_file).read_text(encoding="utf-8")
    try:
        account_info, candidates = extract_candidates(parse_categorizer_response(text))
    except ValueError as e:
        handle_domain_error(ctx, e)

    if file_type is None and file_name:
        file_type = Path(file_name).suffix.lstrip(".").lower() or None

    try:
        result = service.ingest(
            None,
            candidates,
            account_info=account_info,
            file_name=file_name or Path(response_file).name,
            file_type=file_type,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo("\nIngestion complete:")
    click.echo(f"  Upload: {result.upload_id}")
    click.echo(f"  Account: {result.account_id}")
    click.echo(f"  Stored: {result.transaction_count} transactions")
    click.echo(f"  Posted: {result.posted_count}")
    if result.errors:
        click.echo(f"  Unposted: {result.unposted_count}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register ingest command with main CLI."""
    cli.add_command(ingest_response)
