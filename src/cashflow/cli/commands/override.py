"""Settlement override commands."""

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
from cashflow.domain.income_source import IncomeSourceService
from cashflow.domain.override import OverrideService
from cashflow.utils.amount_parser import parse_amount


@click.group()
def override_group():
    """Correct the amount actually settled for a source on a date."""
    pass


@override_group.command("set")
@click.argument("settlement_date", metavar="DATE")
@click.argument("source", metavar="SOURCE")
@click.argument("amount", metavar="AMOUNT")
@click.option("--note", help="Reason for the correction")
@click.pass_context
def set_override(ctx, settlement_date: str, source: str, amount: str, note: str | None):
    """Set the net amount received from SOURCE on DATE.

    Setting it again for the same date and source replaces the previous value.

    Examples:
        cashflow override set 2024-05-12 Visa 950
        cashflow override set 2024-05-12 Visa 940 --note "chargeback"
    """
    db = ctx.obj["db"]
    source_service = IncomeSourceService(db)
    service = OverrideService(db)
    source_id = resolve_source_or_exit(ctx, source_service, source)
    day = parse_date_or_exit(ctx, settlement_date, "date")

    try:
        override_amount = parse_amount(amount)
        service.set_override(day, source_id, override_amount, note=note)
        computed = service.computed_gross(day, source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Override saved for {day.isoformat()}: {override_amount:,.2f} (computed gross {computed:,.2f})")


@override_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@period_options
@click.pass_context
def list_overrides(ctx, start_date: str | None, end_date: str | None, **flags):
    """List settlement overrides."""
    db = ctx.obj["db"]
    source_service = IncomeSourceService(db)
    service = OverrideService(db)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(flags),
    )

    overrides = service.list_overrides(start_date=start, end_date=end)
    if not overrides:
        click.echo("No overrides found.")
        return

    names = {s.id: s.name for s in source_service.list_income_sources(include_inactive=True)}
    click.echo(f"\n{'Date':10}  {'Source':20}  {'Computed':>12}  {'Override':>12}  Note")
    click.echo("-" * 72)
    for override in overrides:
        original = "" if override.original_amount is None else f"{override.original_amount:,.2f}"
        click.echo(
            f"{override.settlement_date.isoformat():10}  {names.get(override.income_source_id, '?'):20}  "
            f"{original:>12}  {override.override_amount:>12,.2f}  {override.note or ''}"
        )


@override_group.command("clear")
@click.argument("settlement_date", metavar="DATE")
@click.argument("source", metavar="SOURCE")
@click.pass_context
def clear_override(ctx, settlement_date: str, source: str):
    """Remove the override for SOURCE on DATE."""
    db = ctx.obj["db"]
    source_service = IncomeSourceService(db)
    service = OverrideService(db)
    source_id = resolve_source_or_exit(ctx, source_service, source)
    day = parse_date_or_exit(ctx, settlement_date, "date")

    try:
        service.clear_override(day, source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Override cleared for {day.isoformat()}")


def register_commands(cli):
    """Register override commands with main CLI."""
    cli.add_command(override_group, name="override")
