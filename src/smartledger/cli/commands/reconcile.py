"""Reconcile command."""

import click
from smartledger.cli.error_handling import handle_domain_error
from smartledger.domain.reconciliation import ReconciliationService
from smartledger.utils.date_parser import parse_date


@click.command("reconcile")
@click.argument("entry_ids", type=int, nargs=-1, required=True)
@click.option("--date", "reconciled_on", help="Statement date the entries were confirmed on (defaults to now)")
@click.pass_context
def reconcile_entries(ctx, entry_ids: tuple[int, ...], reconciled_on: str | None):
    """Mark ledger entries as reconciled against a bank statement.

    Examples:
        smartledger reconcile 14 15 16
        smartledger reconcile 14 --date 2025-01-31
    """
    service = ReconciliationService(ctx.obj["db"])

    when = None
    if reconciled_on:
        try:
            when = parse_date(reconciled_on)
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    for entry_id in entry_ids:
        try:
            entry = service.reconcile_entry(entry_id, when)
        except ValueError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Entry {entry.id} reconciled on {entry.reconciliation_date:%Y-%m-%d}")


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile_entries)
