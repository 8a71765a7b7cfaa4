"""Main CLI entry point."""

import click
from cashflow.cli.logging_config import configure_logging
from cashflow.database.factories import create_sqlite_database

from cashflow.cli.commands import (
    balance,
    expense,
    income,
    override,
    report,
    source,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CASHFLOW_DB_PATH environment variable)",
    envvar="CASHFLOW_DB_PATH",
)
@click.option("-v", "--verbose", is_flag=True, help="Log settlement warnings and debug details")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Cashflow - Cash-flow forecasting for a small business.

    Record daily income per source and supplier payments, and see when the
    money actually lands in the bank and what the balance will be.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Only open the database when running a command, not for --help
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


source.register_commands(cli)
income.register_commands(cli)
expense.register_commands(cli)
override.register_commands(cli)
balance.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
