"""Journal posting engine.

Turns cost and billing status transitions into balanced debit/credit posting
pairs. Postings belonging to one cost or billing share the description prefix
``"<Kind> #<id>:"``, which is how they are found again for deletion.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from projectledger.config import LedgerConfig
from projectledger.database.base import Database
from projectledger.domain.chart import PostingMap
from projectledger.domain.entities import (
    Billing,
    Direction,
    EntityKind,
    EntryStatus,
    Posting,
    PostingPair,
    Project,
    ProjectCost,
    parse_entity_kind,
    parse_status,
)
from projectledger.domain.errors import (
    ConflictError,
    NotFoundError,
    PartialWriteError,
    ReferentialIntegrityError,
    ValidationError,
    entity_not_found,
    invalid_transition,
    missing_accounts,
    missing_project_reference,
    payment_before_accrual,
    unbalanced_postings,
)
from projectledger.domain.events import EventBus, PostingsChanged

logger = logging.getLogger(__name__)

Entry = Union[ProjectCost, Billing]

VALID_TRANSITIONS = {
    EntryStatus.PENDING: frozenset({EntryStatus.UNPAID, EntryStatus.REJECTED}),
    EntryStatus.UNPAID: frozenset({EntryStatus.PAID, EntryStatus.REJECTED}),
    EntryStatus.PAID: frozenset(),
    EntryStatus.REJECTED: frozenset(),
}


def correlation_prefix(entity_kind: EntityKind, entity_id: int) -> str:
    """Description prefix shared by every posting of one cost or billing."""
    return f"{entity_kind.value} #{entity_id}:"


def is_valid_transition(old_status: EntryStatus, new_status: EntryStatus) -> bool:
    return new_status in VALID_TRANSITIONS[old_status]


class JournalService:
    """Service that writes and removes postings for costs and billings."""

    def __init__(
        self,
        db: Database,
        posting_map: Optional[PostingMap] = None,
        config: Optional[LedgerConfig] = None,
        events: Optional[EventBus] = None,
    ):
        """Initialize journal service.

        Args:
            db: Database instance
            posting_map: Category to account lookup (defaults to the standard map)
            config: Counter-account configuration (defaults to LedgerConfig())
            events: Bus that receives PostingsChanged after each committed change
        """
        self.db = db
        self.posting_map = posting_map or PostingMap()
        self.config = config or LedgerConfig()
        self.events = events

    def post_for_entity(
        self,
        entity_kind: Union[str, EntityKind],
        entity: Entry,
        old_status: Optional[EntryStatus] = None,
        payment_date: Optional[date] = None,
    ) -> Union[PostingPair, int, None]:
        """Write the postings that the entity's current status calls for.

        Args:
            entity_kind: Cost or Billing
            entity: The cost or billing, carrying its new status
            old_status: Status before the change, used for logging only
            payment_date: Date of the payment pair for 'paid' (defaults to today)

        Returns:
            The created pair for 'unpaid' and 'paid', the number of deleted
            postings for 'rejected', or None when nothing was posted

        Raises:
            ReferentialIntegrityError: If the project or an account is missing
            ValidationError: If the category is unmapped, the amount is not
                positive, or the payment predates the accrual
        """
        entity_kind = parse_entity_kind(entity_kind)
        if not entity.create_journal_entry:
            logger.debug("%s #%d has journal entries disabled", entity_kind.value, entity.id)
            return None

        logger.debug(
            "Posting %s #%d for %s -> %s",
            entity_kind.value,
            entity.id,
            old_status.value if old_status else None,
            entity.status.value,
        )

        if entity.status == EntryStatus.UNPAID:
            return self._post_accrual(entity_kind, entity)
        if entity.status == EntryStatus.PAID:
            return self._post_payment(entity_kind, entity, payment_date or date.today())
        if entity.status == EntryStatus.REJECTED:
            return self.delete_postings(entity_kind, entity.id)
        return None

    def delete_postings(self, entity_kind: Union[str, EntityKind], entity_id: int) -> int:
        """Delete every posting correlated to a cost or billing.

        Returns:
            Number of postings deleted
        """
        entity_kind = parse_entity_kind(entity_kind)
        count = self.db.delete_postings_by_prefix(correlation_prefix(entity_kind, entity_id))
        if count:
            logger.info("Deleted %d postings for %s #%d", count, entity_kind.value, entity_id)
        return count

    def delete_journal_entries(self, entity_kind: Union[str, EntityKind], entity_id: int) -> dict:
        """Delete an entity's postings and report the count as {"count": n}."""
        return {"count": self.delete_postings(entity_kind, entity_id)}

    def record_status_change(
        self,
        entity_kind: Union[str, EntityKind],
        entity: Entry,
        old_status: Union[str, EntryStatus],
        new_status: Union[str, EntryStatus],
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
        payment_date: Optional[date] = None,
    ) -> Union[PostingPair, int, None]:
        """Apply a status transition with its history row and postings.

        The status update, the history row and the postings are written in one
        atomic unit. The entity's version must still match the stored row.

        Args:
            entity_kind: Cost or Billing
            entity: The cost or billing as the caller read it
            old_status: Status the caller believes the entity has
            new_status: Target status
            actor_id: ID of the user making the change
            note: Free-text note stored in the history row
            payment_date: Date of the payment pair for 'paid'

        Returns:
            Same as post_for_entity

        Raises:
            ValidationError: If a status is unknown or the transition is not allowed
            ConflictError: If the stored entity changed since it was read
            NotFoundError: If the entity no longer exists
            ReferentialIntegrityError: If the project or an account is missing
        """
        entity_kind = parse_entity_kind(entity_kind)
        old_status = parse_status(old_status)
        new_status = parse_status(new_status)

        if not is_valid_transition(old_status, new_status):
            raise ValidationError(
                invalid_transition(entity_kind.value, entity.id, old_status.value, new_status.value)
            )

        stored = self._load_entry(entity_kind, entity.id)
        if stored.status != old_status:
            raise ConflictError(
                f"{entity_kind.value} #{entity.id} is {stored.status.value}, "
                f"not {old_status.value}; reload and retry"
            )

        with self.db.atomic():
            new_version = self.db.update_entry_status(
                entity_kind, entity.id, new_status, expected_version=entity.version
            )
            self.db.add_status_history(
                entity_kind, entity.id, old_status, new_status, changed_by=actor_id, notes=note
            )
            result = self.post_for_entity(
                entity_kind,
                replace(stored, status=new_status, version=new_version),
                old_status=old_status,
                payment_date=payment_date,
            )

        logger.info(
            "%s #%d status %s -> %s", entity_kind.value, entity.id, old_status.value, new_status.value
        )
        if result is not None and self.events is not None:
            event = PostingsChanged(
                entity_kind=entity_kind,
                entity_id=entity.id,
                project_id=stored.project_id,
                status=new_status,
            )
            self.db.after_commit(lambda: self.events.publish(event))
        return result

    def verify_pairing(self, entity_kind: Union[str, EntityKind], entity_id: int) -> int:
        """Check that an entity's postings form balanced debit/credit pairs.

        Unbalanced postings are removed before the error is raised, so no
        single-leg entry stays visible to reports.

        Returns:
            Number of postings checked

        Raises:
            PartialWriteError: If the legs do not balance
        """
        entity_kind = parse_entity_kind(entity_kind)
        postings = self.db.list_postings(prefix=correlation_prefix(entity_kind, entity_id))

        debits = [p for p in postings if p.direction == Direction.DEBIT]
        credits = [p for p in postings if p.direction == Direction.CREDIT]
        debit_total = sum((p.amount for p in debits), Decimal("0"))
        credit_total = sum((p.amount for p in credits), Decimal("0"))

        if len(debits) == len(credits) and debit_total == credit_total:
            return len(postings)

        removed = self.delete_postings(entity_kind, entity_id)
        logger.error(
            "Removed %d unbalanced postings for %s #%d", removed, entity_kind.value, entity_id
        )
        raise PartialWriteError(
            unbalanced_postings(entity_kind.value, entity_id, debit_total, credit_total),
            entity_kind=entity_kind.value,
            entity_id=entity_id,
            removed=removed,
        )

    def list_postings(
        self,
        entity_kind: Union[str, EntityKind, None] = None,
        entity_id: Optional[int] = None,
        as_of: Optional[date] = None,
        account_code: Optional[str] = None,
    ) -> list[Posting]:
        """List postings, optionally only those of one cost or billing."""
        prefix = None
        if entity_kind is not None and entity_id is not None:
            prefix = correlation_prefix(parse_entity_kind(entity_kind), entity_id)
        return self.db.list_postings(as_of=as_of, prefix=prefix, account_code=account_code)

    def _load_entry(self, entity_kind: EntityKind, entity_id: int) -> Entry:
        if entity_kind == EntityKind.COST:
            entry = self.db.get_project_cost(entity_id)
        else:
            entry = self.db.get_billing(entity_id)
        if entry is None:
            raise NotFoundError(entity_not_found(entity_kind.value, entity_id))
        return entry

    def _require_project(self, entity_kind: EntityKind, entity: Entry) -> Project:
        project = self.db.get_project(entity.project_id)
        if project is None:
            raise ReferentialIntegrityError(
                missing_project_reference(entity_kind.value, entity.id, entity.project_id)
            )
        return project

    def _require_accounts(self, entity_kind: EntityKind, entity_id: int, *codes: str) -> None:
        missing = [code for code in codes if self.db.get_account(code) is None]
        if missing:
            raise ReferentialIntegrityError(
                missing_accounts(missing, f"{entity_kind.value} #{entity_id}")
            )

    def _check_amount(self, entity_kind: EntityKind, entity: Entry) -> None:
        if entity.amount <= 0:
            raise ValidationError(
                f"{entity_kind.value} #{entity.id} amount must be positive, got {entity.amount}"
            )

    def _describe(self, entity_kind: EntityKind, entity: Entry, project: Project, event: str) -> str:
        prefix = correlation_prefix(entity_kind, entity.id)
        label = f"{project.name} ({project.project_code})"
        if entity_kind == EntityKind.COST:
            return f"{prefix} {label} - {entity.category} - {event}"
        return f"{prefix} {label} - {event}"

    def _post_accrual(self, entity_kind: EntityKind, entity: Entry) -> PostingPair:
        project = self._require_project(entity_kind, entity)
        self._check_amount(entity_kind, entity)

        if entity_kind == EntityKind.COST:
            debit = self.posting_map.expense_account_for(entity.category)
            credit = self.config.payable_account
            description = self._describe(entity_kind, entity, project, "Cost Recorded")
        else:
            debit = self.config.receivable_account
            credit = self.posting_map.revenue_account_for(project.revenue_line)
            description = self._describe(entity_kind, entity, project, "Invoice Created")
        self._require_accounts(entity_kind, entity.id, debit, credit)

        with self.db.atomic():
            self.db.delete_postings_by_prefix(correlation_prefix(entity_kind, entity.id))
            pair = self.db.create_posting_pair(
                posting_date=entity.business_date,
                debit_account=debit,
                credit_account=credit,
                amount=entity.amount,
                description=description,
                project_id=project.id,
            )

        logger.info(
            "Posted %s #%d accrual: DR %s / CR %s %s",
            entity_kind.value, entity.id, debit, credit, entity.amount,
        )
        return pair

    def _post_payment(self, entity_kind: EntityKind, entity: Entry, payment_date: date) -> PostingPair:
        project = self._require_project(entity_kind, entity)
        self._check_amount(entity_kind, entity)
        if payment_date < entity.business_date:
            raise ValidationError(payment_before_accrual(entity_kind.value, entity.id, payment_date))

        if entity_kind == EntityKind.COST:
            debit = self.config.payable_account
            credit = self.config.cash_account
            description = self._describe(entity_kind, entity, project, "Payment Made")
        else:
            debit = self.config.cash_account
            credit = self.config.receivable_account
            description = self._describe(entity_kind, entity, project, "Payment Received")
        self._require_accounts(entity_kind, entity.id, debit, credit)

        with self.db.atomic():
            pair = self.db.create_posting_pair(
                posting_date=payment_date,
                debit_account=debit,
                credit_account=credit,
                amount=entity.amount,
                description=description,
                project_id=project.id,
            )

        logger.info(
            "Posted %s #%d payment: DR %s / CR %s %s",
            entity_kind.value, entity.id, debit, credit, entity.amount,
        )
        return pair
