"""Main CLI entry point."""

import click
from smartledger.database.factories import create_sqlite_database
from smartledger.logging_config import configure_logging

# Import and register all commands at module level
from smartledger.cli.commands import (
    account,
    transaction,
    add,
    ingest,
    upload,
    reconcile,
    category,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SMARTLEDGER_DB_PATH environment variable)",
    envvar="SMARTLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="SMARTLEDGER_LOG_LEVEL",
    help="Log level for messages written to stderr",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default="console",
    show_default=True,
    envvar="SMARTLEDGER_LOG_FORMAT",
    help="Log output format",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_format: str):
    """Smartledger - Bank statement ledger.

    Ingest categorized bank statement transactions, post them to per-account
    ledgers with running balances, and reconcile entries against statements.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level, log_format=log_format)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
transaction.register_commands(cli)
add.register_commands(cli)
ingest.register_commands(cli)
upload.register_commands(cli)
reconcile.register_commands(cli)
category.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
