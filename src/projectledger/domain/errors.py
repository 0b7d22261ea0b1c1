"""Shared domain error messages and error types."""

from datetime import date
from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or stale versions."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ReferentialIntegrityError(DomainError):
    """A posting references a project or account that does not exist."""


class PartialWriteError(DomainError):
    """A posting pair was found with a missing or unbalanced leg.

    The orphan postings have already been removed when this is raised.
    """

    def __init__(self, message: str, entity_kind: str, entity_id: int, removed: int):
        super().__init__(message)
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        self.removed = removed


class ImmutableRecordError(DomainError):
    """Attempt to modify an append-only record."""


def account_not_found(code: str) -> str:
    """Return message for missing account."""
    return f"Account {code} not found"


def project_not_found(project_id: int) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def entity_not_found(entity_kind: str, entity_id: int) -> str:
    """Return message for a missing cost or billing record."""
    return f"{entity_kind} #{entity_id} not found"


def fixed_asset_not_found(asset_id: int) -> str:
    """Return message for missing fixed asset."""
    return f"Fixed asset {asset_id} not found"


def missing_project_reference(entity_kind: str, entity_id: int, project_id: int) -> str:
    """Return message when a cost or billing points at a missing project."""
    return (
        f"{entity_kind} #{entity_id} references project {project_id}, "
        "which does not exist; no postings were written"
    )


def missing_accounts(codes: list[str], context: str) -> str:
    """Return message when the chart of accounts lacks required codes."""
    joined = ", ".join(sorted(codes))
    return f"Chart of accounts is missing {joined} required for {context}"


def invalid_status(value: str) -> str:
    """Return message for an unknown status value."""
    return f"Unknown status '{value}'. Expected one of: pending, unpaid, paid, rejected"


def invalid_transition(entity_kind: str, entity_id: int, old: str, new: str) -> str:
    """Return message for a status transition the state machine forbids."""
    return f"Invalid status transition for {entity_kind} #{entity_id}: {old} -> {new}"


def stale_version(entity_kind: str, entity_id: int, expected: int, actual: int) -> str:
    """Return message when a concurrent update changed the record first."""
    return (
        f"{entity_kind} #{entity_id} was modified concurrently "
        f"(expected version {expected}, found {actual}); reload and retry"
    )


def unbalanced_postings(
    entity_kind: str, entity_id: int, debits: Decimal, credits: Decimal
) -> str:
    """Return message for a detected partial write."""
    return (
        f"Postings for {entity_kind} #{entity_id} are unbalanced "
        f"(debits {debits}, credits {credits}); orphan legs were removed"
    )


def invalid_report_date(value: str) -> str:
    """Return message for a malformed report date."""
    return f"Invalid report date '{value}': expected YYYY-MM-DD"


def account_delete_blocked(code: str, posting_count: int) -> str:
    """Return message when an account still has postings."""
    return (
        f"Cannot delete account {code}: it has {posting_count} "
        f"posting{'s' if posting_count != 1 else ''}."
    )


def payment_before_accrual(entity_kind: str, entity_id: int, on: date) -> str:
    """Return message for a payment date earlier than the accrual."""
    return f"Payment date {on.isoformat()} for {entity_kind} #{entity_id} precedes its accrual date"
