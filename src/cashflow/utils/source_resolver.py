"""Utility for resolving income source names to IDs."""

from cashflow.domain import errors
from cashflow.domain.errors import NotFoundError
from cashflow.domain.income_source import IncomeSourceService


def resolve_income_source(source_service: IncomeSourceService, source: str | int) -> int:
    """Resolve income source name or ID to income source ID.

    Inactive sources resolve too, so their entries and overrides can still
    be managed.

    Args:
        source_service: IncomeSourceService instance
        source: Income source name (str) or ID (int or string representation of int)

    Returns:
        Income source ID

    Raises:
        NotFoundError: If the income source is not found
    """
    # If it's already an integer, use it as ID
    if isinstance(source, int):
        if source_service.get_income_source(source) is None:
            raise NotFoundError(errors.income_source_not_found(source))
        return source

    # Try to parse as integer (handles string IDs like "1")
    try:
        source_id = int(source)
    except (ValueError, TypeError):
        source_id = None

    if source_id is not None:
        if source_service.get_income_source(source_id) is None:
            raise NotFoundError(errors.income_source_not_found(source_id))
        return source_id

    found = source_service.get_income_source_by_name(source)
    if found is None:
        raise NotFoundError(errors.income_source_not_found(source))
    return found.id
