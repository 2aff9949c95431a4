"""Transaction management commands."""

import click
from smartledger.cli.account_resolution import resolve_account_or_exit
from smartledger.cli.date_filters import collect_period_flags, period_options, resolve_cli_date_range
from smartledger.cli.error_handling import handle_domain_error
from smartledger.domain.account import AccountService
from smartledger.domain.errors import DomainError
from smartledger.domain.ledger import LedgerService
from smartledger.domain.transaction import TransactionService


def _amount_text(txn) -> str:
    if txn.amount is None or txn.type is None:
        return "?"
    return f"{txn.type.signed(txn.amount):,.2f}"


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@period_options
@click.option("--category", help="Category code (e.g., SUPPLIER_PAYMENT)")
@click.option("--type", "txn_type", type=click.Choice(["CREDIT", "DEBIT"], case_sensitive=False))
@click.option("--search", help="Search description and counterparty")
@click.option("--account", help="Account ID, number or name")
@click.option("--upload", "upload_id", type=int, help="Upload ID")
@click.option("--posted/--unposted", default=None, help="Only posted or only unposted transactions")
@click.option("--limit", type=int, help="Maximum number of transactions")
@click.option("--offset", type=int, default=0, help="Number of transactions to skip")
@click.option("--verbose", "-v", is_flag=True, help="Show all fields including reasoning and post errors")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    category: str | None,
    txn_type: str | None,
    search: str | None,
    account: str | None,
    upload_id: int | None,
    posted: bool | None,
    limit: int | None,
    offset: int,
    verbose: bool,
    **period_kwargs,
):
    """View transactions with optional filters, newest first.

    Examples:
        smartledger transaction list --this-month --type DEBIT
        smartledger transaction list --unposted -v
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(period_kwargs),
    )

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, account)

    try:
        transactions = service.query(
            category_code=category,
            txn_type=txn_type,
            start_date=start,
            end_date=end,
            search=search,
            account_id=account_id,
            upload_id=upload_id,
            posted=posted,
            limit=limit,
            offset=offset,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    if verbose:
        click.echo("=" * 100)
        for txn in transactions:
            click.echo(f"\nTransaction ID: {txn.id}")
            click.echo(f"  Date: {txn.date or '?'}")
            click.echo(f"  Amount: {_amount_text(txn)}")
            click.echo(f"  Account ID: {txn.account_id}")
            click.echo(f"  Category: {txn.category_code} (confidence {txn.confidence:.2f})")
            if txn.description:
                click.echo(f"  Description: {txn.description}")
            if txn.counterparty:
                click.echo(f"  Counterparty: {txn.counterparty}")
            if txn.reasoning:
                click.echo(f"  Reasoning: {txn.reasoning}")
            if txn.notes:
                click.echo(f"  Notes: {txn.notes}")
            if txn.is_posted:
                click.echo(f"  Ledger entry: {txn.ledger_entry_id}")
            if txn.post_error:
                click.echo(f"  Post error: {txn.post_error}")
        return

    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Date':<12} {'Amount':>14}  {'Category':<24} {'Posted':<7} {'Description':<30}")
    click.echo("-" * 100)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {str(txn.date or '?'):<12} {_amount_text(txn):>14}  "
            f"{txn.category_code:<24} {'yes' if txn.is_posted else 'no':<7} {txn.description[:30]:<30}"
        )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int):
    """Show a single transaction."""
    db = ctx.obj["db"]
    try:
        txn = TransactionService(db).get(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Transaction {txn.id}")
    click.echo(f"  Date: {txn.date or '?'}")
    click.echo(f"  Amount: {_amount_text(txn)}")
    click.echo(f"  Type: {txn.type.value if txn.type else '?'}")
    click.echo(f"  Account ID: {txn.account_id}")
    click.echo(f"  Upload ID: {txn.upload_id if txn.upload_id is not None else '-'}")
    click.echo(f"  Category: {txn.category_code}{' (manual)' if txn.is_manual else ''}")
    click.echo(f"  Confidence: {txn.confidence:.2f}")
    click.echo(f"  Description: {txn.description}")
    if txn.counterparty:
        click.echo(f"  Counterparty: {txn.counterparty}")
    if txn.reasoning:
        click.echo(f"  Reasoning: {txn.reasoning}")
    if txn.notes:
        click.echo(f"  Notes: {txn.notes}")
    click.echo(f"  Ledger entry: {txn.ledger_entry_id if txn.is_posted else 'not posted'}")
    click.echo(f"  Reconciled: {'yes' if txn.reconciled else 'no'}")
    if txn.post_error:
        click.echo(f"  Post error: {txn.post_error}")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--category", help="Category code from 'smartledger category list'")
@click.option("--notes", help="Notes")
@click.pass_context
def update_transaction(ctx, transaction_id: int, category: str | None, notes: str | None) -> None:
    """Correct a transaction's category or notes.

    Amount, date and type cannot be changed once stored.

    Examples:
        smartledger transaction update 12 --category BANK_FEES
        smartledger transaction update 12 --notes "Quarterly account fee"
    """
    db = ctx.obj["db"]

    if category is None and notes is None:
        click.echo("Error: Nothing to update. Use --category or --notes.", err=True)
        ctx.exit(1)

    try:
        txn = TransactionService(db).update(transaction_id, category_code=category, notes=notes)
        click.echo(f"Updated transaction {txn.id} (category {txn.category_code})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("post")
@click.argument("transaction_ids", type=int, nargs=-1, required=False)
@click.option("--all-unposted", is_flag=True, help="Retry every unposted transaction")
@click.pass_context
def post_transactions(ctx, transaction_ids: tuple[int, ...], all_unposted: bool) -> None:
    """Post (or retry posting) transactions to the ledger.

    Examples:
        smartledger transaction post 7 8
        smartledger transaction post --all-unposted
    """
    db = ctx.obj["db"]
    ledger_service = LedgerService(db)

    ids = list(transaction_ids)
    if all_unposted:
        unposted = TransactionService(db).query(posted=False)
        # Oldest first so same-day entries keep their statement order
        ids.extend(txn.id for txn in reversed(unposted) if txn.id not in ids)
    if not ids:
        click.echo("Error: Give transaction IDs or --all-unposted.", err=True)
        ctx.exit(1)

    failures = 0
    for transaction_id in ids:
        try:
            entry = ledger_service.retry(transaction_id)
            click.echo(
                f"Posted transaction {transaction_id} as entry {entry.id} "
                f"(balance {entry.running_balance:,.2f})"
            )
        except DomainError as e:
            failures += 1
            click.echo(f"Error: {e}", err=True)

    if failures:
        ctx.exit(1)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
