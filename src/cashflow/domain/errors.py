"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class ConfigurationError(DomainError):
    """Income source is missing or has no usable settlement rule."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


def income_source_not_found(source: int | str) -> str:
    """Return message for missing income source."""
    return f"Income source '{source}' not found"


def duplicate_income_source(name: str) -> str:
    """Return message for duplicate income source name."""
    return f"Income source with name '{name}' already exists"


def unknown_income_source(source_id: int, entry_date) -> str:
    """Return message for an entry that references an unknown source."""
    return (
        f"Entry on {entry_date} references unknown income source {source_id}; "
        "settled same-day without fee"
    )


def missing_settlement_rule(source_name: str, entry_date) -> str:
    """Return message for a source without a settlement rule."""
    return (
        f"Income source '{source_name}' has no settlement rule (entry on {entry_date}); "
        "settled same-day without fee"
    )


def payment_not_found(payment_id: int) -> str:
    """Return message for missing payment."""
    return f"Payment {payment_id} not found"


def entry_not_found(entry_id: int) -> str:
    """Return message for missing income entry."""
    return f"Income entry {entry_id} not found"


def override_not_found(settlement_date, source_name: str) -> str:
    """Return message for missing settlement override."""
    return f"No override for '{source_name}' on {settlement_date}"


def skipped_row(kind: str, reason: str, row_index: int) -> str:
    """Return message for a backend row that was skipped."""
    return f"Skipped {kind} row {row_index}: {reason}"
