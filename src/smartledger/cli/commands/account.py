"""Account management commands."""

import click
from decimal import Decimal
from smartledger.cli.account_resolution import resolve_account_or_exit
from smartledger.cli.date_filters import resolve_cli_date_range
from smartledger.cli.error_handling import handle_domain_error
from smartledger.domain.account import AccountService
from smartledger.domain.ledger import LedgerService
from smartledger.domain.reconciliation import ReconciliationService
from smartledger.utils.amount_parser import parse_amount


def _format_money(amount: Decimal, currency: str = "") -> str:
    text = f"{amount:,.2f}"
    return f"{text} {currency}" if currency else text


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--number", help="External account number (IBAN or bank account number)")
@click.option("--type", "account_type", default="checking", show_default=True, help="Account type")
@click.option("--currency", default="EUR", show_default=True, help="ISO currency code")
@click.option("--opening-balance", default="0", show_default=True, help="Opening balance")
@click.pass_context
def create_account(
    ctx, name: str, number: str | None, account_type: str, currency: str, opening_balance: str
):
    """Create a new account.

    Examples:
        smartledger account create "Operating Account" --number GR1601101250000000012300695
        smartledger account create "Savings" --type savings --opening-balance 2500.00
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        balance = parse_amount(opening_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid opening balance: {e}", err=True)
        ctx.exit(1)

    try:
        account_id = service.create_account(
            account_name=name,
            account_number=number,
            account_type=account_type,
            currency=currency.upper(),
            opening_balance=balance,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated accounts")
@click.pass_context
def list_accounts(ctx, include_inactive: bool):
    """List accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(include_inactive=include_inactive)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 90)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.account_name[:24]:24s} | {(acc.account_number or '-')[:28]:28s} | "
            f"{_format_money(acc.current_balance, acc.currency)}{status}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show account details.

    ACCOUNT can be an account ID, number or name.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    acc = service.get_account(account_id)

    click.echo(f"Account {acc.id}: {acc.account_name}")
    click.echo(f"  Number: {acc.account_number or '-'}")
    click.echo(f"  Type: {acc.account_type}")
    click.echo(f"  Currency: {acc.currency}")
    click.echo(f"  Opening balance: {_format_money(acc.opening_balance)}")
    click.echo(f"  Current balance: {_format_money(acc.current_balance)}")
    click.echo(f"  Active: {'yes' if acc.is_active else 'no'}")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", help="New account type")
@click.option("--active/--inactive", default=None, help="Activate or deactivate the account")
@click.pass_context
def update_account(ctx, account: str, name: str | None, account_type: str | None, active: bool | None):
    """Update an account's name, type or active flag.

    Examples:
        smartledger account update 1 --name "Main Account"
        smartledger account update 2 --inactive
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    if name is None and account_type is None and active is None:
        click.echo("Error: Nothing to update. Use --name, --type, --active or --inactive.", err=True)
        ctx.exit(1)

    try:
        updated = service.update_account(
            account_id, account_name=name, account_type=account_type, is_active=active
        )
        click.echo(f"Updated account {updated.id} ('{updated.account_name}')")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("balance")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def account_balance(ctx, account: str):
    """Show current balance, opening balance and net change."""
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    balance = service.get_balance(account_id)
    click.echo(f"Current balance: {_format_money(balance.current)}")
    click.echo(f"Opening balance: {_format_money(balance.opening)}")
    click.echo(f"Net change: {_format_money(balance.net_change)}")


@account_group.command("ledger")
@click.argument("account", metavar="ACCOUNT")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def account_ledger(ctx, account: str, start_date: str | None, end_date: str | None):
    """Show an account's ledger entries with running balances."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags={}
    )

    try:
        entries = LedgerService(db).get_account_ledger(account_id, date_from=start, date_to=end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No ledger entries found.")
        return

    click.echo(f"{'ID':<6} {'Date':<12} {'Type':<7} {'Amount':>14} {'Balance':>14}  R  Description")
    click.echo("-" * 100)
    for entry in entries:
        click.echo(
            f"{entry.id:<6} {str(entry.entry_date):<12} {entry.entry_type.value:<7} "
            f"{_format_money(entry.amount):>14} {_format_money(entry.running_balance):>14}  "
            f"{'*' if entry.reconciled else ' '}  {entry.description[:40]}"
        )


@account_group.command("summary")
@click.argument("account", metavar="ACCOUNT")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def account_summary(ctx, account: str, start_date: str | None, end_date: str | None):
    """Summarize an account's ledger entries."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags={}
    )

    try:
        summary = ReconciliationService(db).get_account_summary(account_id, start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Total credits: {_format_money(summary.total_credits)}")
    click.echo(f"Total debits: {_format_money(summary.total_debits)}")
    click.echo(f"Net flow: {_format_money(summary.net_flow)}")
    click.echo(f"Entries: {summary.total_entries} ({summary.reconciled_entries} reconciled)")
    click.echo(f"Final balance: {_format_money(summary.final_balance)}")


@account_group.command("recompute")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def recompute_balance(ctx, account: str):
    """Recompute an account's current balance from its ledger."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    balance = ReconciliationService(db).recompute_balance(account_id)
    click.echo(f"Current balance: {_format_money(balance)}")


@account_group.command("verify")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def verify_account(ctx, account: str):
    """Check stored running balances against the recomputed ledger."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    mismatched = ReconciliationService(db).verify_running_balances(account_id)
    if not mismatched:
        click.echo("All running balances are consistent.")
        return

    click.echo(
        f"Error: {len(mismatched)} entr{'y' if len(mismatched) == 1 else 'ies'} with wrong running balance: "
        + ", ".join(str(entry_id) for entry_id in mismatched),
        err=True,
    )
    ctx.exit(1)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
