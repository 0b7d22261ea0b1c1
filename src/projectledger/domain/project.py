"""Project, cost and billing domain service."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from projectledger.database.base import Database
from projectledger.domain.entities import (
    Billing,
    EntityKind,
    EntryStatus,
    PostingPair,
    Project as ProjectEntity,
    ProjectCost,
    ProjectStatus,
    RevenueLine,
    StatusHistory,
    parse_entity_kind,
    parse_status,
)
from projectledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    entity_not_found,
    project_not_found,
)
from projectledger.domain.journal import JournalService

logger = logging.getLogger(__name__)

Entry = Union[ProjectCost, Billing]

INITIAL_STATUSES = (EntryStatus.PENDING, EntryStatus.UNPAID)


def parse_project_status(value: Union[str, ProjectStatus]) -> ProjectStatus:
    """Convert a project status name to ProjectStatus."""
    if isinstance(value, ProjectStatus):
        return value
    try:
        return ProjectStatus(str(value).strip().lower())
    except ValueError:
        known = ", ".join(s.value for s in ProjectStatus)
        raise ValidationError(f"Unknown project status '{value}'. Expected one of: {known}")


def parse_revenue_line(value: Union[str, RevenueLine]) -> RevenueLine:
    """Convert a revenue line name to RevenueLine."""
    if isinstance(value, RevenueLine):
        return value
    try:
        return RevenueLine(str(value).strip().lower())
    except ValueError:
        known = ", ".join(r.value for r in RevenueLine)
        raise ValidationError(f"Unknown revenue line '{value}'. Expected one of: {known}")


class ProjectService:
    """Service for projects and their cost and billing records.

    Status changes are delegated to the journal service, which writes the
    matching postings.
    """

    def __init__(self, db: Database, journal: Optional[JournalService] = None):
        """Initialize project service.

        Args:
            db: Database instance
            journal: Journal service used for status changes (built from db if omitted)
        """
        self.db = db
        self.journal = journal or JournalService(db)

    # Projects
    def create_project(
        self,
        project_code: str,
        name: str,
        total_value: Decimal,
        start_date: date,
        revenue_line: Union[str, RevenueLine],
        status: Union[str, ProjectStatus] = ProjectStatus.ONGOING,
        end_date: Optional[date] = None,
    ) -> int:
        """Create a new project.

        Returns:
            Project ID

        Raises:
            ValidationError: If a field is invalid
            ConflictError: If the project code is already used
        """
        project_code = project_code.strip()
        if not project_code:
            raise ValidationError("Project code must not be empty")
        if not name or not name.strip():
            raise ValidationError("Project name must not be empty")
        if total_value < 0:
            raise ValidationError(f"Project value must not be negative, got {total_value}")
        if end_date is not None and end_date < start_date:
            raise ValidationError(
                f"Project end date {end_date.isoformat()} precedes start date {start_date.isoformat()}"
            )
        revenue_line = parse_revenue_line(revenue_line)
        status = parse_project_status(status)

        if self.db.get_project_by_code(project_code) is not None:
            raise ConflictError(f"Project with code '{project_code}' already exists")

        project_id = self.db.create_project(
            project_code=project_code,
            name=name.strip(),
            total_value=total_value,
            start_date=start_date,
            revenue_line=revenue_line,
            status=status,
            end_date=end_date,
        )
        logger.info("Created project %s (%d)", project_code, project_id)
        return project_id

    def get_project(self, project_id: int) -> Optional[ProjectEntity]:
        """Get project by ID."""
        return self.db.get_project(project_id)

    def get_project_by_code(self, project_code: str) -> Optional[ProjectEntity]:
        """Get project by project code."""
        return self.db.get_project_by_code(project_code)

    def resolve_project(self, project: Union[str, int]) -> int:
        """Resolve a project code or ID to the project ID.

        Codes take precedence over IDs, so a numeric-looking code still resolves.

        Raises:
            NotFoundError: If no project matches
        """
        if isinstance(project, str):
            by_code = self.db.get_project_by_code(project.strip())
            if by_code is not None:
                return by_code.id
            try:
                project = int(project)
            except ValueError:
                raise NotFoundError(f"Project '{project}' not found")

        if self.db.get_project(project) is None:
            raise NotFoundError(project_not_found(project))
        return project

    def list_projects(self, status: Union[str, ProjectStatus, None] = None) -> list[ProjectEntity]:
        """List projects, optionally with one status."""
        if status is not None:
            status = parse_project_status(status)
        return self.db.list_projects(status=status)

    def update_project_status(
        self, project_id: int, status: Union[str, ProjectStatus], end_date: Optional[date] = None
    ) -> None:
        """Change a project's status. Setting the current status is a no-op.

        Raises:
            NotFoundError: If the project does not exist
        """
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        status = parse_project_status(status)
        if status == project.status and end_date is None:
            return
        self.db.update_project_status(project_id, status, end_date=end_date)

    # Costs and billings
    def _check_new_entry(self, project_id: int, amount: Decimal, status: EntryStatus) -> None:
        if self.db.get_project(project_id) is None:
            raise NotFoundError(project_not_found(project_id))
        if amount <= 0:
            raise ValidationError(f"Amount must be positive, got {amount}")
        if status not in INITIAL_STATUSES:
            raise ValidationError(
                f"New records start as pending or unpaid, not {status.value}"
            )

    def add_cost(
        self,
        project_id: int,
        category: str,
        amount: Decimal,
        cost_date: date,
        description: Optional[str] = None,
        status: Union[str, EntryStatus] = EntryStatus.PENDING,
        create_journal_entry: bool = True,
        actor_id: Optional[int] = None,
    ) -> int:
        """Create a project cost.

        A cost created as unpaid is recorded as a pending -> unpaid change and
        posts immediately.

        Returns:
            Cost ID

        Raises:
            NotFoundError: If the project does not exist
            ValidationError: If the amount, category or status is invalid
        """
        status = parse_status(status)
        self._check_new_entry(project_id, amount, status)
        self.journal.posting_map.expense_account_for(category)

        with self.db.atomic():
            cost_id = self.db.create_project_cost(
                project_id=project_id,
                category=category.strip().lower(),
                amount=amount,
                cost_date=cost_date,
                description=description,
                create_journal_entry=create_journal_entry,
            )
            if status == EntryStatus.UNPAID:
                self.change_status(EntityKind.COST, cost_id, status, actor_id=actor_id)
        return cost_id

    def add_billing(
        self,
        project_id: int,
        amount: Decimal,
        billing_date: date,
        description: Optional[str] = None,
        status: Union[str, EntryStatus] = EntryStatus.PENDING,
        create_journal_entry: bool = True,
        actor_id: Optional[int] = None,
    ) -> int:
        """Create a billing.

        A billing created as unpaid is recorded as a pending -> unpaid change
        and posts immediately.

        Returns:
            Billing ID

        Raises:
            NotFoundError: If the project does not exist
            ValidationError: If the amount or status is invalid
        """
        status = parse_status(status)
        self._check_new_entry(project_id, amount, status)

        with self.db.atomic():
            billing_id = self.db.create_billing(
                project_id=project_id,
                amount=amount,
                billing_date=billing_date,
                description=description,
                create_journal_entry=create_journal_entry,
            )
            if status == EntryStatus.UNPAID:
                self.change_status(EntityKind.BILLING, billing_id, status, actor_id=actor_id)
        return billing_id

    def get_entry(self, entity_kind: Union[str, EntityKind], entity_id: int) -> Entry:
        """Get a cost or billing.

        Raises:
            NotFoundError: If it does not exist
        """
        entity_kind = parse_entity_kind(entity_kind)
        if entity_kind == EntityKind.COST:
            entry = self.db.get_project_cost(entity_id)
        else:
            entry = self.db.get_billing(entity_id)
        if entry is None:
            raise NotFoundError(entity_not_found(entity_kind.value, entity_id))
        return entry

    def list_costs(self, project_id: Optional[int] = None) -> list[ProjectCost]:
        return self.db.list_project_costs(project_id=project_id)

    def list_billings(self, project_id: Optional[int] = None) -> list[Billing]:
        return self.db.list_billings(project_id=project_id)

    def change_status(
        self,
        entity_kind: Union[str, EntityKind],
        entity_id: int,
        new_status: Union[str, EntryStatus],
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
        payment_date: Optional[date] = None,
        expected_version: Optional[int] = None,
    ) -> Union[PostingPair, int, None]:
        """Move a cost or billing to a new status and post accordingly.

        Args:
            entity_kind: Cost or Billing
            entity_id: Record ID
            new_status: Target status
            actor_id: ID of the user making the change
            note: Note stored in the status history
            payment_date: Payment date for 'paid' (defaults to today)
            expected_version: Version the caller last read; a mismatch means
                someone else changed the record first

        Raises:
            NotFoundError: If the record does not exist
            ConflictError: If expected_version is stale
            ValidationError: If the transition is not allowed
        """
        entity_kind = parse_entity_kind(entity_kind)
        entry = self.get_entry(entity_kind, entity_id)
        if expected_version is not None:
            entry = replace(entry, version=expected_version)
        return self.journal.record_status_change(
            entity_kind,
            entry,
            old_status=entry.status,
            new_status=new_status,
            actor_id=actor_id,
            note=note,
            payment_date=payment_date,
        )

    def delete_entry(self, entity_kind: Union[str, EntityKind], entity_id: int) -> int:
        """Delete a cost or billing together with its postings.

        Its status history is kept.

        Returns:
            Number of postings deleted

        Raises:
            NotFoundError: If it does not exist
        """
        entity_kind = parse_entity_kind(entity_kind)
        self.get_entry(entity_kind, entity_id)
        with self.db.atomic():
            count = self.journal.delete_postings(entity_kind, entity_id)
            self.db.delete_entry(entity_kind, entity_id)
        logger.info("Deleted %s #%d", entity_kind.value, entity_id)
        return count

    def status_history(self, entity_kind: Union[str, EntityKind], entity_id: int) -> list[StatusHistory]:
        """Status changes of a cost or billing, newest first."""
        return self.db.list_status_history(parse_entity_kind(entity_kind), entity_id)
