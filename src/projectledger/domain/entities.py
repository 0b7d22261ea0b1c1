"""Domain model entities for projectledger.

These are pure data classes representing business concepts, independent of
database schema. Money is always Decimal; no entity performs float math.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from projectledger.domain.errors import ValidationError, invalid_status


class AccountClass(str, Enum):
    """Classification of an account in the chart of accounts."""

    REVENUE = "revenue"
    EXPENSE = "expense"
    ASSET = "asset"
    FIXED_ASSET = "fixedAsset"
    CONTRA_ASSET = "contraAsset"
    LIABILITY = "liability"
    EQUITY = "equity"

    @property
    def is_debit_normal(self) -> bool:
        """True for classes where a debit increases the balance."""
        return self in (AccountClass.ASSET, AccountClass.FIXED_ASSET, AccountClass.CONTRA_ASSET)


class Direction(str, Enum):
    """Side of a posting."""

    DEBIT = "debit"
    CREDIT = "credit"


class EntryStatus(str, Enum):
    """Lifecycle status of a project cost or billing."""

    PENDING = "pending"
    UNPAID = "unpaid"
    PAID = "paid"
    REJECTED = "rejected"


class ProjectStatus(str, Enum):
    """Lifecycle status of a project."""

    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    PLANNED = "planned"


class EntityKind(str, Enum):
    """Business records that produce postings.

    The value is the label used in posting descriptions.
    """

    COST = "Cost"
    BILLING = "Billing"


class RevenueLine(str, Enum):
    """Service line a project bills under."""

    BORING = "boring"
    SONDIR = "sondir"
    CONSULTATION = "consultation"


def parse_status(value: Union[str, EntryStatus]) -> EntryStatus:
    """Convert a status value to EntryStatus.

    Raises:
        ValidationError: If the value is not a known status
    """
    if isinstance(value, EntryStatus):
        return value
    try:
        return EntryStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(invalid_status(str(value)))


def parse_entity_kind(value: Union[str, EntityKind]) -> EntityKind:
    """Convert 'cost'/'billing' (any case) to EntityKind."""
    if isinstance(value, EntityKind):
        return value
    normalized = str(value).strip().lower()
    for kind in EntityKind:
        if kind.value.lower() == normalized:
            return kind
    raise ValidationError(f"Unknown entity kind '{value}'. Expected Cost or Billing")


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry."""

    code: str
    name: str
    account_class: AccountClass
    category: Optional[str] = None
    subcategory: Optional[str] = None
    is_current_asset: Optional[bool] = None
    is_current_liability: Optional[bool] = None
    created_at: Optional[datetime] = None

    @property
    def is_current(self) -> bool:
        """Current/non-current flag for the account's side; unset means current."""
        if self.account_class == AccountClass.LIABILITY:
            flag = self.is_current_liability
        else:
            flag = self.is_current_asset
        return flag is None or flag


@dataclass(frozen=True)
class Posting:
    """One debit or credit leg of a journal entry."""

    id: int
    date: date
    direction: Direction
    account_code: str
    description: str
    amount: Decimal
    project_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class PostingPair:
    """Balanced debit and credit legs written for one business event."""

    debit: Posting
    credit: Posting

    @property
    def amount(self) -> Decimal:
        return self.debit.amount


@dataclass(frozen=True)
class Project:
    """Construction project, the aggregation key for WIP."""

    id: int
    project_code: str
    name: str
    total_value: Decimal
    status: ProjectStatus
    start_date: date
    end_date: Optional[date]
    revenue_line: RevenueLine
    created_at: datetime


@dataclass(frozen=True)
class ProjectCost:
    """Cost incurred on a project."""

    id: int
    project_id: int
    category: str
    description: Optional[str]
    amount: Decimal
    date: date
    status: EntryStatus
    create_journal_entry: bool
    version: int
    created_at: datetime

    @property
    def business_date(self) -> date:
        return self.date


@dataclass(frozen=True)
class Billing:
    """Client billing (invoice) on a project."""

    id: int
    project_id: int
    description: Optional[str]
    amount: Decimal
    billing_date: date
    status: EntryStatus
    create_journal_entry: bool
    version: int
    created_at: datetime

    @property
    def business_date(self) -> date:
        return self.billing_date


@dataclass(frozen=True)
class StatusHistory:
    """Append-only record of one status change."""

    id: int
    entity_kind: EntityKind
    entity_id: int
    old_status: EntryStatus
    new_status: EntryStatus
    changed_by: Optional[int]
    notes: Optional[str]
    changed_at: datetime


@dataclass(frozen=True)
class FixedAsset:
    """Fixed asset carried at book value on the balance sheet."""

    id: int
    name: str
    category: Optional[str]
    acquisition_date: date
    value: Decimal
    accumulated_depreciation: Decimal
    useful_life_years: int
    created_at: datetime

    @property
    def book_value(self) -> Decimal:
        return self.value - self.accumulated_depreciation


@dataclass(frozen=True)
class Depreciation:
    """Straight-line depreciation of an asset as of a date."""

    original_value: Decimal
    depreciation_per_year: Decimal
    depreciation_per_month: Decimal
    days_elapsed: int
    accumulated_depreciation: Decimal
    book_value: Decimal
    is_fully_depreciated: bool


@dataclass(frozen=True)
class DepreciationYear:
    """One calendar year of a depreciation schedule."""

    year: int
    beginning_value: Decimal
    depreciation: Decimal
    accumulated_depreciation: Decimal
    ending_value: Decimal
    percent_of_year: Decimal


@dataclass(frozen=True)
class AccountBalance:
    """Aggregated balance of one account (or a synthesized report line)."""

    account: Account
    balance: Decimal

    @property
    def code(self) -> str:
        return self.account.code

    @property
    def name(self) -> str:
        return self.account.name


@dataclass(frozen=True)
class ProjectWip:
    """WIP figure for a single project."""

    project_id: int
    project_code: str
    name: str
    costs: Decimal
    billed: Decimal

    @property
    def wip(self) -> Decimal:
        return self.costs - self.billed


@dataclass(frozen=True)
class WipValuation:
    """WIP across ongoing projects, split into asset and liability pools."""

    as_of: date
    projects: tuple[ProjectWip, ...]
    total_wip: Decimal
    total_negative_wip: Decimal

    @property
    def asset_projects(self) -> tuple[ProjectWip, ...]:
        return tuple(p for p in self.projects if p.wip > 0)

    @property
    def liability_projects(self) -> tuple[ProjectWip, ...]:
        return tuple(p for p in self.projects if p.wip < 0)


@dataclass(frozen=True)
class WipSnapshot:
    """Stored WIP figure of a project, taken after its postings changed."""

    id: int
    project_id: int
    as_of: date
    costs: Decimal
    billed: Decimal
    wip: Decimal
    progress: Decimal
    recorded_at: datetime


# category -> subcategory -> lines
GroupedBalances = dict[str, dict[str, list[AccountBalance]]]


@dataclass(frozen=True)
class BalanceSheetSummary:
    """Totals and the reconciliation check of a balance sheet."""

    total_assets: Decimal
    total_current_assets: Decimal
    total_non_current_assets: Decimal
    total_account_assets: Decimal
    total_fixed_assets: Decimal
    total_wip: Decimal
    total_contra_assets: Decimal
    total_negative_wip: Decimal
    total_current_liabilities: Decimal
    total_non_current_liabilities: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_revenue: Decimal
    total_expense: Decimal
    net_income: Decimal
    total_equity_with_income: Decimal
    total_liabilities_and_equity: Decimal
    difference: Decimal
    is_balanced: bool


@dataclass(frozen=True)
class BalanceSheet:
    """Categorized balance sheet as of a report date."""

    as_of: date
    current_assets: GroupedBalances
    non_current_assets: GroupedBalances
    fixed_assets: tuple[FixedAsset, ...]
    wip_items: tuple[ProjectWip, ...]
    current_liabilities: GroupedBalances
    non_current_liabilities: GroupedBalances
    equity: GroupedBalances
    summary: BalanceSheetSummary


@dataclass(frozen=True)
class ComparativeBalanceSheet:
    """Two balance sheets with deltas of their headline totals."""

    current: BalanceSheet
    previous: BalanceSheet
    changes: dict[str, Decimal] = field(default_factory=dict)
    percent_changes: dict[str, Decimal] = field(default_factory=dict)
