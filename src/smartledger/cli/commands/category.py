"""Category catalog commands."""

import click
from smartledger.domain.categories import CATEGORIES
from smartledger.domain.entities import TransactionType


@click.group()
def category_group():
    """Browse the category catalog."""
    pass


@category_group.command("list")
@click.option("--type", "txn_type", type=click.Choice(["CREDIT", "DEBIT"], case_sensitive=False))
def list_categories(txn_type: str | None):
    """List category codes."""
    for heading, kind in (("Income (CREDIT)", TransactionType.CREDIT), ("Expenses (DEBIT)", TransactionType.DEBIT)):
        if txn_type and kind.value != txn_type.upper():
            continue
        click.echo(f"\n{heading}:")
        for category in CATEGORIES:
            if category.type is kind:
                click.echo(f"  {category.code:<25} {category.name}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
