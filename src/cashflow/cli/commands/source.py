"""Income source management commands."""

import click
from cashflow.cli.error_handling import handle_domain_error
from cashflow.cli.source_resolution import resolve_source_or_exit
from cashflow.domain.entities import SettlementRule, SettlementType
from cashflow.domain.errors import DomainError
from cashflow.domain.income_source import IncomeSourceService
from cashflow.utils.amount_parser import parse_amount

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

SETTLEMENT_CHOICES = [settlement_type.value for settlement_type in SettlementType] + ["none"]


def rule_options(func):
    """Attach the settlement rule options shared by add and set-rule."""
    options = [
        click.option(
            "--settlement",
            "settlement_type",
            type=click.Choice(SETTLEMENT_CHOICES),
            default="daily",
            show_default=True,
            help="Settlement type ('none' leaves the source without a rule)",
        ),
        click.option("--delay-days", type=int, default=1, show_default=True, help="Days until settlement (daily)"),
        click.option("--day-of-week", type=int, default=0, show_default=True, help="Settlement weekday, 0=Sunday (weekly)"),
        click.option("--day-of-month", type=int, default=1, show_default=True, help="Settlement day of next month (monthly)"),
        click.option("--first-cutoff", type=int, default=14, show_default=True, help="Last day of the first half (bimonthly)"),
        click.option("--first-settlement", type=int, default=2, show_default=True, help="Settlement day for the first half (bimonthly)"),
        click.option("--second-settlement", type=int, default=8, show_default=True, help="Settlement day for the second half (bimonthly)"),
        click.option("--coupon-day", type=int, default=1, show_default=True, help="Settlement day of next month (custom/coupons)"),
        click.option("--commission", default="0", show_default=True, help="Fee as percent of gross"),
        click.option("--fixed-fee", default="0", show_default=True, help="Fixed fee per entry"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_rule(
    settlement_type: str,
    delay_days: int,
    day_of_week: int,
    day_of_month: int,
    first_cutoff: int,
    first_settlement: int,
    second_settlement: int,
    coupon_day: int,
    commission: str,
    fixed_fee: str,
) -> SettlementRule | None:
    """Build a settlement rule from command line options."""
    if settlement_type == "none":
        return None
    return SettlementRule(
        settlement_type=SettlementType(settlement_type),
        delay_days=delay_days,
        day_of_week=day_of_week,
        day_of_month=day_of_month,
        bimonthly_first_cutoff=first_cutoff,
        bimonthly_first_settlement=first_settlement,
        bimonthly_second_settlement=second_settlement,
        coupon_settlement_day=coupon_day,
        commission_rate=parse_amount(commission),
        fixed_fee=parse_amount(fixed_fee),
    )


def describe_rule(rule: SettlementRule | None) -> str:
    """Return a short human readable description of a settlement rule."""
    if rule is None:
        return "no rule"

    settlement_type = SettlementType(rule.settlement_type)
    if settlement_type == SettlementType.SAME_DAY:
        timing = "same day"
    elif settlement_type == SettlementType.DAILY:
        timing = f"+{rule.delay_days} days"
    elif settlement_type == SettlementType.WEEKLY:
        timing = f"weekly on {DAY_NAMES[rule.day_of_week]}"
    elif settlement_type == SettlementType.MONTHLY:
        timing = f"monthly on day {rule.day_of_month}"
    elif settlement_type == SettlementType.BIMONTHLY:
        timing = (
            f"1-{rule.bimonthly_first_cutoff} on day {rule.bimonthly_first_settlement}, "
            f"rest on day {rule.bimonthly_second_settlement}"
        )
    else:
        timing = f"coupons on day {rule.coupon_settlement_day}"

    fees = []
    if rule.commission_rate:
        fees.append(f"{rule.commission_rate}% fee")
    if rule.fixed_fee:
        fees.append(f"{rule.fixed_fee} fixed fee")
    return ", ".join([timing, *fees])


@click.group()
def source_group():
    """Manage income sources and their settlement rules."""
    pass


@source_group.command("add")
@click.argument("name", metavar="SOURCE_NAME")
@rule_options
@click.pass_context
def add_source(ctx, name: str, **rule_kwargs):
    """Create a new income source.

    Examples:
        cashflow source add "Cash" --settlement same_day
        cashflow source add "Visa" --settlement daily --delay-days 2 --commission 1.5
        cashflow source add "Isracard" --settlement bimonthly --commission 2
    """
    db = ctx.obj["db"]
    service = IncomeSourceService(db)

    try:
        rule = build_rule(**rule_kwargs)
        source_id = service.create_income_source(name=name, rule=rule)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created income source '{name.strip()}' (ID: {source_id})")
    click.echo(f"Settlement: {describe_rule(rule)}")


@source_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated sources")
@click.pass_context
def list_sources(ctx, include_inactive: bool):
    """List income sources."""
    db = ctx.obj["db"]
    service = IncomeSourceService(db)

    sources = service.list_income_sources(include_inactive=include_inactive)
    if not sources:
        click.echo("No income sources found.")
        return

    click.echo("\nIncome sources:")
    click.echo("-" * 70)
    for source in sources:
        status = "" if source.is_active else " (inactive)"
        click.echo(f"ID: {source.id:3d} | {source.name:20s} | {describe_rule(source.rule)}{status}")


@source_group.command("set-rule")
@click.argument("source", metavar="SOURCE")
@rule_options
@click.pass_context
def set_rule(ctx, source: str, **rule_kwargs):
    """Replace the settlement rule of an income source.

    SOURCE can be an income source name or ID.

    Examples:
        cashflow source set-rule "Visa" --settlement weekly --day-of-week 3
        cashflow source set-rule 2 --settlement monthly --day-of-month 10 --commission 2.5
    """
    db = ctx.obj["db"]
    service = IncomeSourceService(db)
    source_id = resolve_source_or_exit(ctx, service, source)

    try:
        rule = build_rule(**rule_kwargs)
        service.set_rule(source_id, rule)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Updated settlement rule: {describe_rule(rule)}")


@source_group.command("deactivate")
@click.argument("source", metavar="SOURCE")
@click.pass_context
def deactivate_source(ctx, source: str):
    """Deactivate an income source.

    Income already recorded for it still settles, shown under "other".
    """
    db = ctx.obj["db"]
    service = IncomeSourceService(db)
    source_id = resolve_source_or_exit(ctx, service, source)

    try:
        service.deactivate(source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deactivated income source {source_id}")


@source_group.command("activate")
@click.argument("source", metavar="SOURCE")
@click.pass_context
def activate_source(ctx, source: str):
    """Reactivate an income source."""
    db = ctx.obj["db"]
    service = IncomeSourceService(db)
    source_id = resolve_source_or_exit(ctx, service, source)

    try:
        service.activate(source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Activated income source {source_id}")


def register_commands(cli):
    """Register income source commands with main CLI."""
    cli.add_command(source_group, name="source")
