"""Opening balance commands."""

import click
from cashflow.cli.date_filters import parse_date_or_exit
from cashflow.cli.error_handling import handle_domain_error
from cashflow.domain.errors import DomainError
from cashflow.domain.override import SettingsService
from cashflow.utils.amount_parser import parse_amount


@click.group()
def balance_group():
    """Manage the opening balance the cash flow starts from."""
    pass


@balance_group.command("set")
@click.argument("amount", metavar="AMOUNT")
@click.option("--date", "opening_date", default="today", show_default=True, help="Date the balance was taken")
@click.pass_context
def set_balance(ctx, amount: str, opening_date: str):
    """Set the bank balance at the opening date.

    Examples:
        cashflow balance set 25000 --date 2024-02-01
        cashflow balance set "(1,500)"
    """
    db = ctx.obj["db"]
    service = SettingsService(db)
    day = parse_date_or_exit(ctx, opening_date, "date")

    try:
        opening_balance = parse_amount(amount)
        service.set_opening_balance(opening_balance, day)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Opening balance set to {opening_balance:,.2f} on {day.isoformat()}")


@balance_group.command("show")
@click.pass_context
def show_balance(ctx):
    """Show the opening balance."""
    db = ctx.obj["db"]
    service = SettingsService(db)

    settings = service.get_settings()
    if settings is None:
        click.echo("No opening balance set.")
        return

    click.echo(f"Opening balance: {settings.opening_balance:,.2f} on {settings.opening_date.isoformat()}")


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(balance_group, name="balance")
