"""CLI helpers for date range resolution."""

from datetime import date

import click

from cashflow.domain.errors import ValidationError
from cashflow.utils.date_parser import get_date_range, parse_date


def parse_date_or_exit(ctx: click.Context, value: str, label: str) -> date:
    """Parse a date option, or exit with a CLI error."""
    try:
        return parse_date(value)
    except ValidationError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        click.echo(
            "Error: Only one period option (--this-month, --next-month, --last-month, --this-week, --next-week) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --next-month, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    start = None
    end = None

    if period_count == 1:
        for period, is_set in period_flags.items():
            if is_set:
                start, end = get_date_range(period)
                break
    else:
        if start_date:
            start = parse_date_or_exit(ctx, start_date, "start date")

        if end_date:
            end = parse_date_or_exit(ctx, end_date, "end date")

        if start is None and end is None and default_range is not None:
            start, end = default_range

    return start, end


def period_options(func):
    """Attach the period flags understood by resolve_cli_date_range."""
    options = [
        click.option("--this-month", is_flag=True, help="Current calendar month"),
        click.option("--next-month", is_flag=True, help="Next calendar month"),
        click.option("--last-month", is_flag=True, help="Previous calendar month"),
        click.option("--this-week", is_flag=True, help="Current week (Sunday to Saturday)"),
        click.option("--next-week", is_flag=True, help="Next week (Sunday to Saturday)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def period_flags_from(kwargs: dict) -> dict[str, bool]:
    """Pop period flag values from command kwargs, keyed by period name."""
    names = ("this_month", "next_month", "last_month", "this_week", "next_week")
    return {name.replace("_", "-"): bool(kwargs.pop(name, False)) for name in names}
