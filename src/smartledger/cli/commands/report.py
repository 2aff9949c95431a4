"""Reporting commands."""

import click
from smartledger.cli.account_resolution import resolve_account_or_exit
from smartledger.cli.date_filters import collect_period_flags, period_options, resolve_cli_date_range
from smartledger.cli.error_handling import handle_domain_error
from smartledger.domain.account import AccountService
from smartledger.domain.report import ReportService


def _report_filters(func):
    func = click.option("--account", help="Account ID, number or name")(func)
    func = period_options(func)
    func = click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")(func)
    func = click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")(func)
    return func


def _resolve_filters(ctx, start_date, end_date, account, period_kwargs):
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(period_kwargs),
    )
    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, AccountService(ctx.obj["db"]), account)
    return start, end, account_id


@click.group()
def report_group():
    """Income and expense reports."""
    pass


@report_group.command("summary")
@_report_filters
@click.pass_context
def summary_report(ctx, start_date: str | None, end_date: str | None, account: str | None, **period_kwargs):
    """Show total income, expenses and net cash flow.

    Examples:
        smartledger report summary --this-year
        smartledger report summary --start-date 2025-01-01 --account 1
    """
    start, end, account_id = _resolve_filters(ctx, start_date, end_date, account, period_kwargs)
    try:
        summary = ReportService(ctx.obj["db"]).get_summary(start, end, account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Income: {summary.income:,.2f}")
    click.echo(f"Expenses: {summary.expenses:,.2f}")
    click.echo(f"Net cash flow: {summary.net_cash_flow:,.2f}")
    click.echo(f"Transactions: {summary.transaction_count}")


@report_group.command("categories")
@_report_filters
@click.pass_context
def category_report(ctx, start_date: str | None, end_date: str | None, account: str | None, **period_kwargs):
    """Show totals per category, largest first."""
    start, end, account_id = _resolve_filters(ctx, start_date, end_date, account, period_kwargs)
    try:
        breakdown = ReportService(ctx.obj["db"]).get_category_breakdown(start, end, account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not breakdown:
        click.echo("No transactions found.")
        return

    click.echo(f"{'Category':<25} {'Type':<7} {'Count':>6} {'Total':>14}")
    click.echo("-" * 56)
    for row in breakdown:
        click.echo(f"{row.category_code:<25} {row.type.value:<7} {row.count:>6} {row.total:>14,.2f}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
