"""Cash-flow report command."""

from decimal import Decimal

import click
from cashflow.cli.date_filters import parse_date_or_exit, period_flags_from, period_options, resolve_cli_date_range
from cashflow.cli.error_handling import handle_domain_error
from cashflow.domain.entities import CashflowReport, DayRow, Granularity
from cashflow.domain.errors import ConfigurationError, DomainError
from cashflow.domain.report import CashflowReportService
from cashflow.domain.settlement import DEFAULT_LOOKBACK_MONTHS
from cashflow.utils.date_parser import get_date_range

CURRENCY = "₪"


def format_currency(amount: Decimal) -> str:
    """Format an amount as shekels, with a leading minus for negatives."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{CURRENCY}{abs(amount):,.2f}"


def _display_day(day: DayRow, details: bool) -> None:
    click.echo(
        f"{day.date.strftime('%d/%m/%Y'):10}  {format_currency(day.total_income):>14}  "
        f"{format_currency(day.total_expenses):>14}  {format_currency(day.daily_diff):>14}  "
        f"{format_currency(day.cumulative):>14}"
    )
    if not details:
        return
    for item in day.income_items:
        fee = f" (fee {format_currency(item.fee_amount)})" if item.fee_amount else ""
        click.echo(f"    + {item.income_source_name}: {format_currency(item.net_amount)}{fee}")
    for item in day.expense_items:
        click.echo(f"    - {item.supplier_name} [{item.payment_method}]: {format_currency(item.amount)}")


def _display_days(report: CashflowReport, details: bool) -> None:
    header = f"{'Date':10}  {'Income':>14}  {'Expenses':>14}  {'Diff':>14}  {'Balance':>14}"
    for month in report.months:
        click.echo(f"\n{month.label}")
        click.echo(header)
        click.echo("-" * len(header))
        for day in month.days:
            _display_day(day, details)
        click.echo("-" * len(header))
        click.echo(
            f"{'Total':10}  {format_currency(month.total_income):>14}  "
            f"{format_currency(month.total_expenses):>14}  {format_currency(month.total_diff):>14}  "
            f"{format_currency(month.end_cumulative):>14}"
        )


def _display_periods(report: CashflowReport, granularity: Granularity) -> None:
    header = f"{'Period':16}  {'Income':>14}  {'Expenses':>14}  {'Diff':>14}  {'Balance':>14}"
    click.echo()
    click.echo(header)
    click.echo("-" * len(header))
    for bucket in report.periods(granularity):
        click.echo(
            f"{bucket.label:16}  {format_currency(bucket.inflows):>14}  "
            f"{format_currency(bucket.outflows):>14}  {format_currency(bucket.net):>14}  "
            f"{format_currency(bucket.cumulative):>14}"
        )


def _display_warnings(warnings) -> None:
    skipped = [w for w in warnings if not isinstance(w, ConfigurationError)]
    fallback = [w for w in warnings if isinstance(w, ConfigurationError)]
    if skipped:
        click.echo(f"\nWarning: {len(skipped)} rows skipped", err=True)
    if fallback:
        click.echo(f"\nWarning: {len(fallback)} income entries settled with fallback rules", err=True)
    for warning in warnings:
        click.echo(f"  {warning}", err=True)


@click.command("report")
@click.option("--end-date", help="Last day of the report (YYYY-MM-DD or relative)")
@period_options
@click.option(
    "--view",
    type=click.Choice([g.value for g in Granularity]),
    default=Granularity.DAY.value,
    show_default=True,
    help="Group the report by day, week or month",
)
@click.option(
    "--lookback-months",
    type=int,
    default=DEFAULT_LOOKBACK_MONTHS,
    show_default=True,
    help="Months of income read before the opening date",
)
@click.option("--details", is_flag=True, help="List income and expense items under each day")
@click.pass_context
def report(ctx, end_date: str | None, view: str, lookback_months: int, details: bool, **flags):
    """Show the cash-flow report from the opening balance onward.

    The report runs from the stored opening date (see 'cashflow balance') up
    to the end date. A period option ends the report with that period.
    Without either, it runs to the end of the current month.

    Examples:
        cashflow report
        cashflow report --next-month --view week
        cashflow report --end-date 2024-06-30 --view month
    """
    db = ctx.obj["db"]
    service = CashflowReportService(db)

    if lookback_months < 0:
        click.echo("Error: --lookback-months cannot be negative", err=True)
        ctx.exit(1)

    if end_date:
        _, end = resolve_cli_date_range(
            ctx, start_date=None, end_date=None, period_flags=period_flags_from(flags)
        )
        if end is not None:
            click.echo("Error: Period options cannot be combined with --end-date.", err=True)
            ctx.exit(1)
        end = parse_date_or_exit(ctx, end_date, "end date")
    else:
        _, end = resolve_cli_date_range(
            ctx,
            start_date=None,
            end_date=None,
            period_flags=period_flags_from(flags),
            default_range=get_date_range("this-month"),
        )

    try:
        cashflow_report = service.build_report(end, lookback_months=lookback_months)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Cash flow {cashflow_report.opening_date.strftime('%d/%m/%Y')} - {end.strftime('%d/%m/%Y')}"
    )
    click.echo(f"Opening balance: {format_currency(cashflow_report.opening_balance)}")

    if not cashflow_report.days:
        click.echo("No days in range.")
    elif view == Granularity.DAY.value:
        _display_days(cashflow_report, details)
    else:
        _display_periods(cashflow_report, Granularity(view))

    click.echo(f"\nClosing balance: {format_currency(cashflow_report.final_balance)}")

    if cashflow_report.warnings:
        _display_warnings(cashflow_report.warnings)


def register_commands(cli):
    """Register report command with main CLI."""
    cli.add_command(report)
