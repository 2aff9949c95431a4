"""Upload history commands."""

import click
from smartledger.cli.error_handling import handle_domain_error
from smartledger.domain.ingestion import IngestionService


@click.group()
def upload_group():
    """Inspect ingestion uploads."""
    pass


@upload_group.command("list")
@click.pass_context
def list_uploads(ctx):
    """List uploads, newest first."""
    uploads = IngestionService(ctx.obj["db"]).list_uploads()
    if not uploads:
        click.echo("No uploads found.")
        return

    click.echo(f"{'ID':<6} {'Status':<11} {'Count':>6}  {'Account':<8} {'Created':<20} File")
    click.echo("-" * 80)
    for upload in uploads:
        click.echo(
            f"{upload.id:<6} {upload.status.value:<11} {upload.transaction_count:>6}  "
            f"{str(upload.account_id or '-'):<8} {upload.created_at:%Y-%m-%d %H:%M:%S}  {upload.file_name or '-'}"
        )


@upload_group.command("show")
@click.argument("upload_id", type=int)
@click.pass_context
def show_upload(ctx, upload_id: int):
    """Show an upload's status."""
    try:
        upload = IngestionService(ctx.obj["db"]).get_upload(upload_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Upload {upload.id}")
    click.echo(f"  File: {upload.file_name or '-'} ({upload.file_type or 'unknown type'})")
    click.echo(f"  Status: {upload.status.value}")
    click.echo(f"  Transactions: {upload.transaction_count}")
    click.echo(f"  Account ID: {upload.account_id if upload.account_id is not None else '-'}")
    if upload.error_message:
        click.echo(f"  Error: {upload.error_message}")


def register_commands(cli):
    """Register upload commands with main CLI."""
    cli.add_command(upload_group, name="upload")
