"""CLI error handling helpers."""

import logging

import click

from cashflow.domain.errors import DomainError

logger = logging.getLogger(__name__)

ERROR_EXIT_CODE = 1


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print a domain error to stderr and exit the command with failure.

    The error class is logged at DEBUG level, so ``--verbose`` shows
    whether a failure was a validation, lookup or conflict problem.
    """
    logger.debug("%s in '%s': %s", type(error).__name__, ctx.command_path, error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(ERROR_EXIT_CODE)
