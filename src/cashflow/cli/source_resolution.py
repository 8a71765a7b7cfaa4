"""CLI helpers for income source resolution and error handling."""

from __future__ import annotations

import click
from cashflow.cli.error_handling import handle_domain_error
from cashflow.domain.errors import DomainError
from cashflow.domain.income_source import IncomeSourceService
from cashflow.utils.source_resolver import resolve_income_source


def resolve_source_or_exit(
    ctx: click.Context, source_service: IncomeSourceService, source: str | int
) -> int:
    """Resolve income source name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_income_source(source_service, source)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
