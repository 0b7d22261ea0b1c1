"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Callable, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from projectledger.domain.entities import (
    Account,
    AccountClass,
    Billing,
    EntityKind,
    EntryStatus,
    FixedAsset,
    Posting,
    PostingPair,
    Project,
    ProjectCost,
    ProjectStatus,
    RevenueLine,
    StatusHistory,
    WipSnapshot,
)


class Database(ABC):
    """Abstract database interface for projectledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group writes into one unit that commits together or not at all.

        Blocks may nest; only the outermost block commits. An exception
        escaping the outermost block rolls back every write made inside it.
        """
        pass

    @abstractmethod
    def after_commit(self, callback: Callable[[], None]) -> None:
        """Run callback after the outermost atomic block commits.

        Outside an atomic block the callback runs immediately. Callbacks
        queued by a block that rolls back are dropped.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        code: str,
        name: str,
        account_class: AccountClass,
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        is_current_asset: Optional[bool] = None,
        is_current_liability: Optional[bool] = None,
    ) -> str:
        """Create a new account. Returns the account code."""
        pass

    @abstractmethod
    def get_account(self, code: str) -> Optional[Account]:
        """Get account by code."""
        pass

    @abstractmethod
    def list_accounts(self, account_class: Optional[AccountClass] = None) -> list[Account]:
        """List accounts ordered by code, optionally filtered by class."""
        pass

    @abstractmethod
    def update_account(
        self,
        code: str,
        name: Optional[str] = None,
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        is_current_asset: Optional[bool] = None,
        is_current_liability: Optional[bool] = None,
    ) -> None:
        """Update account labels and flags. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_account(self, code: str) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def count_account_postings(self, code: str) -> int:
        """Get count of postings against an account."""
        pass

    # Posting operations
    @abstractmethod
    def create_posting_pair(
        self,
        posting_date: date,
        debit_account: str,
        credit_account: str,
        amount: Decimal,
        description: str,
        project_id: Optional[int] = None,
    ) -> PostingPair:
        """Insert one debit and one credit posting of the same amount."""
        pass

    @abstractmethod
    def delete_postings_by_prefix(self, prefix: str) -> int:
        """Delete postings whose description starts with prefix. Returns count."""
        pass

    @abstractmethod
    def list_postings(
        self,
        as_of: Optional[date] = None,
        prefix: Optional[str] = None,
        account_code: Optional[str] = None,
        project_id: Optional[int] = None,
    ) -> list[Posting]:
        """List postings ordered by date and id.

        Args:
            as_of: Only postings dated on or before this date
            prefix: Only postings whose description starts with this prefix
            account_code: Only postings against this account
            project_id: Only postings tagged with this project
        """
        pass

    # Project operations
    @abstractmethod
    def create_project(
        self,
        project_code: str,
        name: str,
        total_value: Decimal,
        start_date: date,
        revenue_line: RevenueLine,
        status: ProjectStatus = ProjectStatus.ONGOING,
        end_date: Optional[date] = None,
    ) -> int:
        """Create a new project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def get_project_by_code(self, project_code: str) -> Optional[Project]:
        """Get project by its project code."""
        pass

    @abstractmethod
    def list_projects(self, status: Optional[ProjectStatus] = None) -> list[Project]:
        """List projects, optionally filtered by status."""
        pass

    @abstractmethod
    def update_project_status(
        self, project_id: int, status: ProjectStatus, end_date: Optional[date] = None
    ) -> None:
        """Update a project's status and optionally its end date."""
        pass

    # Cost and billing operations
    @abstractmethod
    def create_project_cost(
        self,
        project_id: int,
        category: str,
        amount: Decimal,
        cost_date: date,
        description: Optional[str] = None,
        create_journal_entry: bool = True,
    ) -> int:
        """Create a pending project cost. Returns cost ID."""
        pass

    @abstractmethod
    def get_project_cost(self, cost_id: int) -> Optional[ProjectCost]:
        """Get project cost by ID."""
        pass

    @abstractmethod
    def list_project_costs(
        self, project_id: Optional[int] = None, as_of: Optional[date] = None
    ) -> list[ProjectCost]:
        """List project costs, optionally filtered by project and cutoff date."""
        pass

    @abstractmethod
    def create_billing(
        self,
        project_id: int,
        amount: Decimal,
        billing_date: date,
        description: Optional[str] = None,
        create_journal_entry: bool = True,
    ) -> int:
        """Create a pending billing. Returns billing ID."""
        pass

    @abstractmethod
    def get_billing(self, billing_id: int) -> Optional[Billing]:
        """Get billing by ID."""
        pass

    @abstractmethod
    def list_billings(
        self, project_id: Optional[int] = None, as_of: Optional[date] = None
    ) -> list[Billing]:
        """List billings, optionally filtered by project and cutoff date."""
        pass

    @abstractmethod
    def update_entry_status(
        self,
        entity_kind: EntityKind,
        entity_id: int,
        status: EntryStatus,
        expected_version: Optional[int] = None,
    ) -> int:
        """Set the status of a cost or billing. Returns the new version.

        Raises:
            ConflictError: If expected_version is given and differs from the
                stored version, or another writer updated the row first
        """
        pass

    @abstractmethod
    def delete_entry(self, entity_kind: EntityKind, entity_id: int) -> None:
        """Delete a cost or billing record."""
        pass

    # Status history operations
    @abstractmethod
    def add_status_history(
        self,
        entity_kind: EntityKind,
        entity_id: int,
        old_status: EntryStatus,
        new_status: EntryStatus,
        changed_by: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Append a status history row. Returns its ID."""
        pass

    @abstractmethod
    def list_status_history(self, entity_kind: EntityKind, entity_id: int) -> list[StatusHistory]:
        """List status history for an entity, newest first."""
        pass

    # Fixed asset operations
    @abstractmethod
    def create_fixed_asset(
        self,
        name: str,
        acquisition_date: date,
        value: Decimal,
        useful_life_years: int,
        category: Optional[str] = None,
        accumulated_depreciation: Decimal = Decimal("0"),
    ) -> int:
        """Create a fixed asset. Returns asset ID."""
        pass

    @abstractmethod
    def get_fixed_asset(self, asset_id: int) -> Optional[FixedAsset]:
        """Get fixed asset by ID."""
        pass

    @abstractmethod
    def list_fixed_assets(self, as_of: Optional[date] = None) -> list[FixedAsset]:
        """List fixed assets, optionally only those acquired on or before as_of."""
        pass

    @abstractmethod
    def update_accumulated_depreciation(self, asset_id: int, accumulated: Decimal) -> None:
        """Store a recomputed accumulated depreciation figure."""
        pass

    # WIP history operations
    @abstractmethod
    def add_wip_snapshot(
        self,
        project_id: int,
        as_of: date,
        costs: Decimal,
        billed: Decimal,
        wip: Decimal,
        progress: Decimal,
    ) -> int:
        """Append a WIP snapshot for a project. Returns snapshot ID."""
        pass

    @abstractmethod
    def list_wip_history(self, project_id: int) -> list[WipSnapshot]:
        """List a project's WIP snapshots, newest first."""
        pass
