"""Expense (supplier payment) commands."""

import click
from cashflow.cli.date_filters import (
    parse_date_or_exit,
    period_flags_from,
    period_options,
    resolve_cli_date_range,
)
from cashflow.cli.error_handling import handle_domain_error
from cashflow.domain.errors import DomainError
from cashflow.domain.expense import PAYMENT_METHODS, ExpenseService
from cashflow.utils.amount_parser import parse_amount


@click.group()
def expense_group():
    """Record supplier payments and see what falls due."""
    pass


@expense_group.command("add")
@click.argument("supplier", metavar="SUPPLIER")
@click.argument("amount", metavar="AMOUNT")
@click.option("--due-date", default="today", show_default=True, help="Due date of the first installment")
@click.option(
    "--method",
    type=click.Choice(PAYMENT_METHODS),
    default="bank_transfer",
    show_default=True,
    help="Payment method",
)
@click.option("--installments", type=int, default=1, show_default=True, help="Number of monthly installments")
@click.pass_context
def add_expense(ctx, supplier: str, amount: str, due_date: str, method: str, installments: int):
    """Record a payment to a supplier.

    Examples:
        cashflow expense add "Tnuva" 4200 --due-date 2024-03-10
        cashflow expense add "Landlord" 12000 --method check --installments 3
    """
    db = ctx.obj["db"]
    service = ExpenseService(db)
    first_due = parse_date_or_exit(ctx, due_date, "due date")

    try:
        payment_id = service.record_payment(
            supplier_name=supplier,
            amount=parse_amount(amount),
            due_date=first_due,
            payment_method=method,
            installments=installments,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Recorded payment {payment_id} to '{supplier.strip()}'")
    if installments > 1:
        click.echo(f"Split into {installments} monthly installments from {first_due.isoformat()}")


@expense_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@period_options
@click.pass_context
def list_expenses(ctx, start_date: str | None, end_date: str | None, **flags):
    """List payment installments by due date."""
    db = ctx.obj["db"]
    service = ExpenseService(db)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(flags),
    )

    items = service.list_expenses(start_date=start, end_date=end)
    if not items:
        click.echo("No expenses found.")
        return

    click.echo(f"\n{'Payment':>7}  {'Due':10}  {'Supplier':20}  {'Method':16}  {'Amount':>12}")
    click.echo("-" * 73)
    for item in items:
        installment = ""
        if item.installments_count > 1:
            installment = f" ({item.installment_number}/{item.installments_count})"
        click.echo(
            f"{item.payment_id:>7}  {item.due_date.isoformat():10}  {item.supplier_name:20}  "
            f"{item.payment_method:16}  {item.amount:>12,.2f}{installment}"
        )


@expense_group.command("delete")
@click.argument("payment_id", type=int)
@click.pass_context
def delete_expense(ctx, payment_id: int):
    """Delete a payment with all its installments."""
    db = ctx.obj["db"]
    service = ExpenseService(db)

    try:
        service.delete_payment(payment_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deleted payment {payment_id}")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
