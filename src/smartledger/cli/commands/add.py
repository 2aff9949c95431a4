"""Add transaction command."""

import click
from smartledger.cli.account_resolution import resolve_account_or_exit
from smartledger.cli.error_handling import handle_domain_error
from smartledger.domain.categories import is_known_category
from smartledger.domain.account import AccountService
from smartledger.domain.ledger import LedgerService
from smartledger.domain.transaction import TransactionService


@click.command("add")
@click.option("--account", help="Account ID, number or name (defaults to the default account)")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD, DD/MM/YYYY or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45 or 1.234,56)")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(["CREDIT", "DEBIT"], case_sensitive=False),
    default="DEBIT",
    show_default=True,
    help="CREDIT for money in, DEBIT for money out",
)
@click.option("--description", default="", help="Transaction description")
@click.option("--category", help="Category code (e.g., RENT)")
@click.option("--counterparty", help="Counterparty name")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    account: str | None,
    date: str,
    amount: str,
    txn_type: str,
    description: str,
    category: str | None,
    counterparty: str | None,
    notes: str | None,
):
    """Add a transaction manually and post it to the ledger.

    Examples:
        smartledger add --account 1 --date 2025-01-15 --amount 50.00 --description "Office supplies"
        smartledger add --date today --amount 1000 --type CREDIT --category INVOICE_PAYMENT_FULL
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    transaction_service = TransactionService(db)

    if category is not None and not is_known_category(category.strip().upper()):
        click.echo(f"Error: Unknown category code '{category}'", err=True)
        ctx.exit(1)

    if account:
        account_id = resolve_account_or_exit(ctx, account_service, account)
    else:
        account_id = account_service.get_default_account_id()

    raw = {
        "date": date,
        "amount": amount,
        "type": txn_type.upper(),
        "description": description,
        "categoryCode": category,
        "confidence": 1.0,
        "counterparty": counterparty,
        "notes": notes,
    }

    try:
        transactions, errors = transaction_service.insert_batch(
            [raw], upload_id=None, account_id=account_id, is_manual=True
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    txn = transactions[0]
    if errors:
        click.echo(f"Stored transaction {txn.id} but it cannot be posted:", err=True)
        click.echo(f"  {txn.post_error}", err=True)
        ctx.exit(1)

    try:
        entry = LedgerService(db).post(txn)
    except ValueError as e:
        click.echo(f"Stored transaction {txn.id} but posting failed.", err=True)
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.type.signed(txn.amount):,.2f}")
    click.echo(f"  Category: {txn.category_code}")
    click.echo(f"  Ledger entry: {entry.id} (balance {entry.running_balance:,.2f})")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
