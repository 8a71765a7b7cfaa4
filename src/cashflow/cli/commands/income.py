"""Income entry commands."""

import click
from cashflow.cli.date_filters import (
    parse_date_or_exit,
    period_flags_from,
    period_options,
    resolve_cli_date_range,
)
from cashflow.cli.error_handling import handle_domain_error
from cashflow.cli.source_resolution import resolve_source_or_exit
from cashflow.domain.errors import DomainError
from cashflow.domain.income_entry import IncomeEntryService
from cashflow.domain.income_source import IncomeSourceService
from cashflow.utils.amount_parser import parse_amount


@click.group()
def income_group():
    """Record daily income per source."""
    pass


@income_group.command("add")
@click.argument("source", metavar="SOURCE")
@click.argument("amount", metavar="AMOUNT")
@click.option("--date", "entry_date", default="today", show_default=True, help="Business day (YYYY-MM-DD or relative)")
@click.pass_context
def add_income(ctx, source: str, amount: str, entry_date: str):
    """Record income taken through a source.

    SOURCE can be an income source name or ID.

    Examples:
        cashflow income add "Visa" 1250.50
        cashflow income add Cash 300 --date yesterday
    """
    db = ctx.obj["db"]
    source_service = IncomeSourceService(db)
    service = IncomeEntryService(db)
    source_id = resolve_source_or_exit(ctx, source_service, source)
    day = parse_date_or_exit(ctx, entry_date, "date")

    try:
        entry_id = service.record_income(source_id, day, parse_amount(amount))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Recorded income entry {entry_id} for {day.isoformat()}")


@income_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@click.option("--source", help="Income source name or ID")
@period_options
@click.pass_context
def list_income(ctx, start_date: str | None, end_date: str | None, source: str | None, **flags):
    """List income entries."""
    db = ctx.obj["db"]
    source_service = IncomeSourceService(db)
    service = IncomeEntryService(db)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(flags),
    )
    source_id = resolve_source_or_exit(ctx, source_service, source) if source else None

    entries = service.list_entries(start_date=start, end_date=end, income_source_id=source_id)
    if not entries:
        click.echo("No income entries found.")
        return

    names = {s.id: s.name for s in source_service.list_income_sources(include_inactive=True)}
    click.echo(f"\n{'ID':>5}  {'Date':10}  {'Source':20}  {'Amount':>12}")
    click.echo("-" * 53)
    for entry in entries:
        click.echo(
            f"{entry.id:>5}  {entry.entry_date.isoformat():10}  "
            f"{names.get(entry.income_source_id, '?'):20}  {entry.amount:>12,.2f}"
        )


@income_group.command("delete")
@click.argument("entry_id", type=int)
@click.pass_context
def delete_income(ctx, entry_id: int):
    """Delete an income entry."""
    db = ctx.obj["db"]
    service = IncomeEntryService(db)

    try:
        service.delete_entry(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deleted income entry {entry_id}")


def register_commands(cli):
    """Register income commands with main CLI."""
    cli.add_command(income_group, name="income")
